"""Human-facing names and generated identifiers."""

import keyword
import re

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"\W")
_NON_IDENTIFIER = re.compile(r"[^a-zA-Z0-9_]")


def human_readable_name(name: str) -> str:
    """Turn `snake_case`, `kebab-case` or `camelCase` into `Title Case`."""
    name = name.replace("_", " ").replace("-", " ")
    name = _WHITESPACE.sub(" ", name.strip())
    chars = []
    for i, char in enumerate(name):
        if i > 0 and "A" <= char <= "Z" and name[i - 1] != " ":
            chars.append(" ")
        chars.append(char)
    words = "".join(chars).lower().split(" ")
    formatted = " ".join(word[:1].upper() + word[1:] for word in words)
    return formatted.replace("Partial Update", "Update")


def singularize(word: str) -> str:
    word = word.strip()
    lower = word.lower()
    if not word:
        return word
    if lower.endswith("ies"):
        return word[:-3] + "y"
    if lower.endswith(("sses", "shes", "ches", "xes", "zes", "ses")):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return word[:-1]
    return word


def extract_resource_from_path(path: str) -> tuple[str, bool]:
    """Return the last literal path segment and whether the path has parameters."""
    parts = path.strip("/").split("/") if path.strip("/") else []
    has_param = any("{" in part for part in parts)
    for i in range(len(parts) - 1, -1, -1):
        part = parts[i]
        if not part or part == "api" or part.startswith("{"):
            continue
        # version segment in /api/v1/...
        if part.startswith("v") and len(parts) > 2 and i == 1:
            continue
        return part, has_param
    return "", has_param


def operation_display_name(operation_id: str, path: str, method: str) -> str:
    """Build a display name such as `List Devices` or `Get Device by ID`."""
    resource, has_param = extract_resource_from_path(path)
    if not resource:
        return human_readable_name(operation_id)

    resource_name = human_readable_name(resource)
    suffix = ""
    method = method.upper()
    if method == "GET":
        if has_param:
            action, suffix = "Get", " by ID"
            resource_name = singularize(resource_name)
        else:
            action = "List"
    elif method == "POST":
        action = "Create"
        resource_name = singularize(resource_name)
    elif method in ("PUT", "PATCH", "DELETE"):
        verb = "Delete" if method == "DELETE" else "Update"
        if has_param:
            action = verb
            resource_name = singularize(resource_name)
        else:
            action = f"Bulk {verb}"
    else:
        return human_readable_name(operation_id)

    name = f"{action} {resource_name}{suffix}"
    return name if name.strip() else human_readable_name(operation_id)


def token_name(name: str) -> str:
    """Placeholder-safe form of a parameter or property name."""
    return _NON_WORD.sub("_", name)


def script_identifiers(names: list[str], fallback: str = "param") -> list[str]:
    """Map field names to unique Python identifiers, keeping order."""
    used: set[str] = set()
    result = []
    for idx, name in enumerate(names):
        clean = _NON_IDENTIFIER.sub("_", name or fallback)
        if not clean:
            clean = f"{fallback}_{idx}"
        if clean[0].isdigit():
            clean = "_" + clean
        if keyword.iskeyword(clean):
            clean += "_"
        candidate, n = clean, 0
        while candidate in used:
            n += 1
            candidate = f"{clean}_{n}"
        used.add(candidate)
        result.append(candidate)
    return result
