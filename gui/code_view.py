"""
Read-only view of the generated pseudo-source, with dark-mode highlighting.
"""
from PySide6.QtWidgets import QPlainTextEdit
from PySide6.QtGui import QColor, QFont, QSyntaxHighlighter, QTextCharFormat
import re


class PseudoSourceHighlighter(QSyntaxHighlighter):
    """Highlights keywords, robot calls, numbers and comments."""

    def __init__(self, document):
        super().__init__(document)

        font = QFont('Consolas', 11)
        font.setFixedPitch(True)

        self.keyword_format = QTextCharFormat()
        self.keyword_format.setForeground(QColor('#ff8cc8'))  # Pink for keywords
        self.keyword_format.setFont(font)
        self.keyword_format.setFontWeight(QFont.Weight.Bold)

        self.call_format = QTextCharFormat()
        self.call_format.setForeground(QColor('#74c0fc'))  # Light blue for robot calls
        self.call_format.setFont(font)

        self.number_format = QTextCharFormat()
        self.number_format.setForeground(QColor('#ffd43b'))  # Yellow for numbers
        self.number_format.setFont(font)

        self.string_format = QTextCharFormat()
        self.string_format.setForeground(QColor('#51cf66'))  # Green for strings
        self.string_format.setFont(font)

        self.comment_format = QTextCharFormat()
        self.comment_format.setForeground(QColor('#868e96'))
        self.comment_format.setFont(font)
        self.comment_format.setFontItalic(True)

        self.rules = [
            (re.compile(r'\b(import|def|for|in|if|pass|and|or|not|True|False)\b'), self.keyword_format),
            (re.compile(r'\b(robot|time)\.[a-z_]+'), self.call_format),
            (re.compile(r'\b\d+(\.\d+)?\b'), self.number_format),
            (re.compile(r'"[^"]*"'), self.string_format),
            (re.compile(r'#.*$'), self.comment_format),
        ]

    def highlightBlock(self, text):
        for pattern, fmt in self.rules:
            for match in pattern.finditer(text):
                self.setFormat(match.start(), match.end() - match.start(), fmt)


class CodeView(QPlainTextEdit):
    """Shows the program the learner assembled as readable code."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setReadOnly(True)
        self.setFont(QFont('Consolas', 11))
        self.setStyleSheet("QPlainTextEdit { background-color: #1e1e2e; color: #e0e0e0; }")
        self.highlighter = PseudoSourceHighlighter(self.document())

    def set_code(self, code: str):
        self.setPlainText(code)
