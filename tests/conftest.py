import pytest


class FakeScheduler:
    """Manual scheduler: tasks run only when the test says so."""

    def __init__(self):
        self.tasks = {}
        self.cancelled = []
        self._next = 0

    def schedule(self, delay_ms, fn):
        self._next += 1
        self.tasks[self._next] = (delay_ms, fn)
        return self._next

    def cancel(self, handle):
        self.cancelled.append(handle)
        self.tasks.pop(handle, None)

    def run_all(self):
        tasks = list(self.tasks.values())
        self.tasks.clear()
        for _delay, fn in tasks:
            fn()


class FakeTextWidget:
    """Just enough of ``tk.Text`` for the surface bridge."""

    def __init__(self, text, height=200, width=400, wrap="none"):
        self.text = text
        self.height = height
        self.width = width
        self.options = {"font": "TkFixedFont", "pady": 2, "borderwidth": 1, "wrap": wrap, "padx": 0}
        self.tags = []
        self.removed = []
        self.marks = {}
        self.yview_fraction = None
        self.focused = False

    def cget(self, key):
        return self.options[key]

    def get(self, start, end):
        return self.text

    def winfo_height(self):
        return self.height

    def winfo_width(self):
        return self.width

    def tag_add(self, tag, start, end):
        self.tags.append((tag, start, end))

    def tag_remove(self, tag, start, end):
        self.removed.append(tag)

    def yview_moveto(self, fraction):
        self.yview_fraction = fraction

    def mark_set(self, name, index):
        self.marks[name] = index

    def focus_set(self):
        self.focused = True


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def font_metrics():
    # 20px line height, 10px glyph width.
    return lambda _spec: (20.0, 10.0)


@pytest.fixture
def missing_comma_text():
    return '{\n  "a": 1\n  "b": 2\n}'
