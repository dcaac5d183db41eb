"""
OpenGL viewport for rendering the agent, its trail and the scene obstacles.
"""
import math
from PySide6.QtOpenGLWidgets import QOpenGLWidget
from PySide6.QtCore import Qt, QPoint
from OpenGL.GL import *
from OpenGL.GLU import *
from core.collision import BoundingBox
from core.robot_state import RobotState, Vector3
from utils.geometry import clamp

# zoom, pitch, yaw
DEFAULT_CAMERA = (-20.0, 30.0, -45.0)

DISPLAY_OPTIONS = {
    'grid': 'show_grid',
    'axes': 'show_axes',
    'trail': 'show_trail',
    'follow': 'follow_agent',
}


class Viewport(QOpenGLWidget):
    """3D viewport that follows the simulated agent."""

    def __init__(self, parent=None):
        super().__init__(parent)

        # Scene data pushed in by the main window
        self.robot_state = RobotState()
        self.agent_size = (1.0, 0.5, 1.5)
        self.obstacles = []
        self.trail = []

        # Orbit camera
        self.zoom, self.x_rot, self.y_rot = DEFAULT_CAMERA
        self.last_pos = QPoint()

        self.show_grid = True
        self.show_axes = True
        self.show_trail = True
        self.follow_agent = True

    def set_robot_state(self, state: RobotState):
        """Place the agent. Called for every executor state change."""
        last = self.trail[-1] if self.trail else None
        position = state.position
        if last is None or (last.x, last.z) != (position.x, position.z):
            self.trail.append(position.copy())
        self.robot_state = state
        self.update()

    def set_obstacles(self, obstacles):
        self.obstacles = list(obstacles)
        self.update()

    def set_agent_size(self, agent_size):
        self.agent_size = agent_size
        self.update()

    def clear_trail(self):
        self.trail = []
        self.update()

    def initializeGL(self):
        """Dark background, depth test and alpha blending for the obstacles."""
        glClearColor(0.1, 0.1, 0.18, 1.0)
        glEnable(GL_DEPTH_TEST)
        glEnable(GL_LINE_SMOOTH)
        glEnable(GL_BLEND)
        glBlendFunc(GL_SRC_ALPHA, GL_ONE_MINUS_SRC_ALPHA)

    def resizeGL(self, w, h):
        """Perspective projection matching the widget aspect."""
        glViewport(0, 0, w, h)
        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        gluPerspective(60, w/h if h > 0 else 1, 0.1, 1000.0)

    def paintGL(self):
        """Draw the scene from the orbit camera, centred on the agent when following."""
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()

        glTranslatef(0, 0, self.zoom)
        glRotatef(self.x_rot, 1, 0, 0)
        glRotatef(self.y_rot, 0, 1, 0)
        if self.follow_agent:
            p = self.robot_state.position
            glTranslatef(-p.x, -p.y, -p.z)

        if self.show_grid:
            self.draw_grid()
        if self.show_axes:
            self.draw_axes()
        for obstacle in self.obstacles:
            self.draw_box(obstacle.bounds, (1.0, 0.42, 0.42))
        if self.show_trail:
            self.draw_trail()
        self.draw_agent()

    def draw_grid(self):
        """Draw the floor grid in the x/z plane."""
        glLineWidth(1.0)
        glColor3f(0.3, 0.3, 0.3)

        glBegin(GL_LINES)
        for i in range(-25, 26):
            glVertex3f(i, 0, -25)
            glVertex3f(i, 0, 25)
            glVertex3f(-25, 0, i)
            glVertex3f(25, 0, i)
        glEnd()

    def draw_axes(self):
        """Unit axes at the origin; blue is the agent's forward at heading 0."""
        glLineWidth(3.0)
        glBegin(GL_LINES)
        for color, tip in (((1.0, 0.0, 0.0), (3, 0.01, 0)),
                           ((0.0, 1.0, 0.0), (0, 3, 0)),
                           ((0.0, 0.0, 1.0), (0, 0.01, 3))):
            glColor3f(*color)
            glVertex3f(0, 0.01, 0)
            glVertex3f(*tip)
        glEnd()

    def draw_box(self, bounds: BoundingBox, color):
        """Draw a solid box with darker edges."""
        x0, y0, z0 = bounds.min_x, bounds.min_y, bounds.min_z
        x1, y1, z1 = bounds.max_x, bounds.max_y, bounds.max_z
        faces = [
            ((x0, y0, z0), (x1, y0, z0), (x1, y1, z0), (x0, y1, z0)),
            ((x0, y0, z1), (x1, y0, z1), (x1, y1, z1), (x0, y1, z1)),
            ((x0, y0, z0), (x0, y1, z0), (x0, y1, z1), (x0, y0, z1)),
            ((x1, y0, z0), (x1, y1, z0), (x1, y1, z1), (x1, y0, z1)),
            ((x0, y1, z0), (x1, y1, z0), (x1, y1, z1), (x0, y1, z1)),
            ((x0, y0, z0), (x1, y0, z0), (x1, y0, z1), (x0, y0, z1)),
        ]

        glColor4f(color[0], color[1], color[2], 0.85)
        glBegin(GL_QUADS)
        for face in faces:
            for vertex in face:
                glVertex3f(*vertex)
        glEnd()

        glLineWidth(1.5)
        glColor3f(color[0] * 0.5, color[1] * 0.5, color[2] * 0.5)
        for face in faces:
            glBegin(GL_LINE_LOOP)
            for vertex in face:
                glVertex3f(*vertex)
            glEnd()

    def draw_agent(self):
        """Draw the agent body rotated to its heading, plus a heading marker."""
        p = self.robot_state.position
        width, height, depth = self.agent_size
        color = (0.26, 0.6, 1.0) if not self.robot_state.is_moving else (0.4, 0.8, 1.0)

        glPushMatrix()
        glTranslatef(p.x, p.y, p.z)
        glRotatef(math.degrees(self.robot_state.heading), 0, 1, 0)
        body = BoundingBox.from_center(Vector3(0, height / 2.0, 0),
                                       Vector3(width, height, depth))
        self.draw_box(body, color)

        glLineWidth(3.0)
        glColor3f(1.0, 1.0, 1.0)
        glBegin(GL_LINES)
        glVertex3f(0, height + 0.01, 0)
        glVertex3f(0, height + 0.01, depth)
        glEnd()
        glPopMatrix()

    def draw_trail(self):
        """Draw the path travelled so far."""
        if len(self.trail) < 2:
            return
        glLineWidth(2.0)
        glColor3f(1.0, 0.85, 0.25)
        glBegin(GL_LINE_STRIP)
        for point in self.trail:
            glVertex3f(point.x, point.y + 0.02, point.z)
        glEnd()

    def mousePressEvent(self, event):
        """Remember where an orbit drag starts."""
        self.last_pos = event.pos()

    def mouseMoveEvent(self, event):
        """Orbit the camera while the left button is held."""
        dx = event.pos().x() - self.last_pos.x()
        dy = event.pos().y() - self.last_pos.y()

        if event.buttons() & Qt.LeftButton:
            self.x_rot = clamp(self.x_rot + dy * 0.5, -89.0, 89.0)
            self.y_rot += dx * 0.5

        self.last_pos = event.pos()
        self.update()

    def wheelEvent(self, event):
        """Dolly towards or away from the agent."""
        delta = event.angleDelta().y() / 120.0
        self.zoom = min(-2.0, self.zoom + delta * 1.5)
        self.update()

    def toggle_display_option(self, option):
        """Flip one of 'grid', 'axes', 'trail' or 'follow'."""
        attribute = DISPLAY_OPTIONS.get(option)
        if attribute is None:
            return
        setattr(self, attribute, not getattr(self, attribute))
        self.update()

    def reset_view(self):
        """Put the orbit camera back to its starting angle and distance."""
        self.zoom, self.x_rot, self.y_rot = DEFAULT_CAMERA
        self.update()
