import re
from bananadb.schemas import ParsedCarListing

_NON_ALNUM = re.compile(r"[^a-z0-9]")

def _as_text(value) -> str:
    # Integral floats print like JSON numbers, so 15000.0 and 15000 collide on purpose
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

def identity_string(listing: ParsedCarListing) -> str:
    extras = listing.extra_fields()
    parts = [listing.make, listing.model, listing.mileage, listing.year, listing.price,
             extras.get("power_hp"), extras.get("location")]
    joined = "".join(_as_text(p) for p in parts if p)
    return _NON_ALNUM.sub("", joined.lower())

def string_hash(text: str) -> str:
    """31-multiplier string hash on a signed 32-bit accumulator, as hex.

    Not collision resistant: two listings can share an identifier.
    """
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return format(abs(h), "x").zfill(8)[-12:]

def generate_unique_identifier(listing: ParsedCarListing, source: str) -> str:
    return f"{source}-{string_hash(identity_string(listing))}"
