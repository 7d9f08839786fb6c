import re
from typing import Iterable, List, Union

from pydantic import EmailStr, TypeAdapter, ValidationError

_email_adapter = TypeAdapter(EmailStr)


def is_email(value) -> bool:
    try:
        _email_adapter.validate_python(str(value or "").strip())
    except ValidationError:
        return False
    return True


def normalize_recipients(to: Union[str, Iterable[str], None]) -> List[str]:
    """Accept "a@b.com,c@d.com", "a@b.com;c@d.com" or a list; drop anything that is not an address."""
    if isinstance(to, str):
        candidates = re.split(r"[;,]", to)
    elif isinstance(to, (list, tuple)):
        candidates = [str(x) for x in to]
    else:
        return []
    return [c.strip() for c in candidates if is_email(c)]
