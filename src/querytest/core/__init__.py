"""Scenario file parsing and client discovery.

This package defines the core infrastructure for reading scenario files
and locating query clients.

It provides:
- a streaming XML tokenizer producing tagged element events;
- a stateful parser reducing those events into a `Scenario`;
- discovery of plugin-provided query client factories.
"""

from .events import ElementEnd, ElementStart, Event, iter_events
from .loader import ClientRegistry
from .parser import ScenarioParser, parse, parse_file

__all__ = (
    'ClientRegistry',
    'ElementEnd',
    'ElementStart',
    'Event',
    'ScenarioParser',
    'iter_events',
    'parse',
    'parse_file',
)
