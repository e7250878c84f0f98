"""Pure, line-oriented JSON decision logic (no Tk/runtime side effects)."""
