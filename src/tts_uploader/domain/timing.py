"""Timing primitives shared by retrying and polling services."""

from collections.abc import Awaitable, Callable

SleepFunc = Callable[[float], Awaitable[None]]
