from typing import List, Tuple

MAX_NAME_LEN = 100
MAX_DESCRIPTION_LEN = 2000
MAX_VISIT_GOAL = 50


def _truncate(text: str, max_len: int) -> Tuple[str, bool]:
    if text is None:
        return "", False
    s = str(text)
    if len(s) > max_len:
        return s[:max_len], True
    return s, False


def normalize_name(name: str) -> str:
    """Dedup key for user-typed location names."""
    return " ".join(str(name or "").split()).casefold()


def parse_visit_goal(raw) -> int:
    """Lenient integer parse: blank or non-numeric input means no goal."""
    if raw is None:
        return 0
    try:
        return int(str(raw).strip())
    except ValueError:
        pass
    # "3 per week" -> 3, like a leading-digits parse
    digits = ""
    for ch in str(raw).strip():
        if ch.isdigit() or (ch == "-" and not digits):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return 0


def validate_location_fields(*, name: str, visit_goal, description: str = "") -> Tuple[dict, List[str]]:
    errors: List[str] = []
    warnings: List[str] = []

    name_s, name_trunc = _truncate((name or "").strip(), MAX_NAME_LEN)
    if not name_s.strip():
        errors.append("Location name is required.")
    if name_trunc:
        warnings.append(f"Location name truncated to {MAX_NAME_LEN} characters")

    desc_s, desc_trunc = _truncate(description or "", MAX_DESCRIPTION_LEN)
    if desc_trunc:
        warnings.append(f"Description truncated to {MAX_DESCRIPTION_LEN} characters")

    goal_i = parse_visit_goal(visit_goal)
    if goal_i < 0 or goal_i > MAX_VISIT_GOAL:
        errors.append(f"Visit goal must be between 0 and {MAX_VISIT_GOAL}.")
        goal_i = max(0, min(MAX_VISIT_GOAL, goal_i))

    sanitized = {
        "name": name_s.strip(),
        "visit_goal": goal_i,
        "description": desc_s.strip(),
    }
    # Return errors + warnings combined for display (non-blocking for warnings)
    return sanitized, errors + warnings
