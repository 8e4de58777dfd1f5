"""
Labels for clarity.
"""

from typing import Literal

AttributeMatch = Literal["exact", "close", "wrong", "hidden"]
Direction = Literal["up", "down"]
GameStatus = Literal["PLAYING", "WON", "LOST"]
Typing = Literal["Static", "Dynamic"]

# One display line in the session log
LineKind = Literal["command", "error", "success", "info", "warning"]

AttributeName = Literal[
    "paradigm",
    "typing",
    "garbageCollection",
    "designedBy",
    "firstAppeared",
    "mainUseCase",
]
