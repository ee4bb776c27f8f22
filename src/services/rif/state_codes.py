"""
SSA State Codes.

Maps US state names and postal abbreviations to the two-digit SSA state
codes used in PRVDR_STATE_CD.
"""

from typing import Optional

# (name, postal abbreviation, SSA code)
_STATES: tuple[tuple[str, str, str], ...] = (
    ("Alabama", "AL", "01"),
    ("Alaska", "AK", "02"),
    ("Arizona", "AZ", "03"),
    ("Arkansas", "AR", "04"),
    ("California", "CA", "05"),
    ("Colorado", "CO", "06"),
    ("Connecticut", "CT", "07"),
    ("Delaware", "DE", "08"),
    ("District of Columbia", "DC", "09"),
    ("Florida", "FL", "10"),
    ("Georgia", "GA", "11"),
    ("Hawaii", "HI", "12"),
    ("Idaho", "ID", "13"),
    ("Illinois", "IL", "14"),
    ("Indiana", "IN", "15"),
    ("Iowa", "IA", "16"),
    ("Kansas", "KS", "17"),
    ("Kentucky", "KY", "18"),
    ("Louisiana", "LA", "19"),
    ("Maine", "ME", "20"),
    ("Maryland", "MD", "21"),
    ("Massachusetts", "MA", "22"),
    ("Michigan", "MI", "23"),
    ("Minnesota", "MN", "24"),
    ("Mississippi", "MS", "25"),
    ("Missouri", "MO", "26"),
    ("Montana", "MT", "27"),
    ("Nebraska", "NE", "28"),
    ("Nevada", "NV", "29"),
    ("New Hampshire", "NH", "30"),
    ("New Jersey", "NJ", "31"),
    ("New Mexico", "NM", "32"),
    ("New York", "NY", "33"),
    ("North Carolina", "NC", "34"),
    ("North Dakota", "ND", "35"),
    ("Ohio", "OH", "36"),
    ("Oklahoma", "OK", "37"),
    ("Oregon", "OR", "38"),
    ("Pennsylvania", "PA", "39"),
    ("Puerto Rico", "PR", "40"),
    ("Rhode Island", "RI", "41"),
    ("South Carolina", "SC", "42"),
    ("South Dakota", "SD", "43"),
    ("Tennessee", "TN", "44"),
    ("Texas", "TX", "45"),
    ("Utah", "UT", "46"),
    ("Vermont", "VT", "47"),
    ("Virgin Islands", "VI", "48"),
    ("Virginia", "VA", "49"),
    ("Washington", "WA", "50"),
    ("West Virginia", "WV", "51"),
    ("Wisconsin", "WI", "52"),
    ("Wyoming", "WY", "53"),
)

SSA_STATE_CODES: dict[str, str] = {}
for _name, _abbreviation, _code in _STATES:
    SSA_STATE_CODES[_name.lower()] = _code
    SSA_STATE_CODES[_abbreviation.lower()] = _code


def get_state_code(state: Optional[str]) -> Optional[str]:
    """SSA code for a state name or abbreviation, or None when unknown."""
    if not state:
        return None
    return SSA_STATE_CODES.get(state.strip().lower())
