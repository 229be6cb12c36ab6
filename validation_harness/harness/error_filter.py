from typing import Dict, Iterable, List, Set, Tuple


def filter_failures(
    failures: Dict[str, List[str]],
    ignored: Iterable[str],
    required: Iterable[str],
) -> Tuple[Dict[str, List[str]], Set[str]]:
    """
    Drop messages containing an ignored pattern and modules left with no
    messages. Every required pattern found in any message, ignored or
    not, counts as observed. Returns the surviving failures and the
    required patterns never observed. Inputs are not modified.
    """

    ignored = list(ignored)
    missing = set(required)

    surviving: Dict[str, List[str]] = {}

    for module_name, messages in failures.items():
        kept: List[str] = []

        for message in messages:
            missing -= {pattern for pattern in missing if pattern in message}

            if any(pattern in message for pattern in ignored):
                continue

            kept.append(message)

        if kept:
            surviving[module_name] = kept

    return surviving, missing
