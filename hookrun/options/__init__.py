from .configuration import RunConfiguration
from .table import OPTIONS, OptionSpec, format_usage, format_version
from .parser import FlagMatch, MatchKind, NotFound, OptionMatch, OptionParser, ResolvedOption, ValueMatch
from .applier import Action, ParseOutcome, apply_option, parse_args

__all__ = [
    "Action",
    "FlagMatch",
    "MatchKind",
    "NotFound",
    "OPTIONS",
    "OptionMatch",
    "OptionParser",
    "OptionSpec",
    "ParseOutcome",
    "ResolvedOption",
    "RunConfiguration",
    "ValueMatch",
    "apply_option",
    "format_usage",
    "format_version",
    "parse_args",
]
