class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now


def make_block(block_id, block_type, x=0, y=0, children=None, **inputs):
    """Editor-style block dict."""
    return {
        "id": block_id,
        "type": block_type,
        "category": "motion",
        "x": x,
        "y": y,
        "inputs": inputs,
        "children": list(children or []),
    }
