import logging

from .config_loader import (
    MachineSpecification,
    Transition,
    load_specification,
    parse_description,
    parse_yaml_description,
)
from .errors import InterpreterError, ParseError, ResourceError, RuntimeFault
from .machine import (
    ACCEPT_TOKEN,
    REJECT_TOKEN,
    MachineResult,
    Tape,
    TuringMachine,
    format_configuration,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ACCEPT_TOKEN",
    "REJECT_TOKEN",
    "InterpreterError",
    "MachineResult",
    "MachineSpecification",
    "ParseError",
    "ResourceError",
    "RuntimeFault",
    "Tape",
    "Transition",
    "TuringMachine",
    "format_configuration",
    "load_specification",
    "parse_description",
    "parse_yaml_description",
]
