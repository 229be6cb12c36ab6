from .run_from_file import (
    discover_definitions as discover_definitions,
    run_from_file as run_from_file,
)
