from .convert import handle_convert, _convert_single_file, _print_batch_summary
from .rules import handle_rules

__all__ = [
  "handle_convert",
  "handle_rules",
]
