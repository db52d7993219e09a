"""Backend diagnostic codes that are stylistic rather than correctness errors."""

VARIABLE_DECLARED_BUT_NEVER_USED = frozenset({6196, 6133})
PROPERTY_DECLARED_BUT_NEVER_USED = frozenset({6138})
ALL_IMPORTS_ARE_UNUSED = frozenset({6192})
UNREACHABLE_CODE = frozenset({7027})
UNUSED_LABEL = frozenset({7028})
FALL_THROUGH_CASE_IN_SWITCH = frozenset({7029})
NOT_ALL_CODE_PATHS_RETURN_A_VALUE = frozenset({7030})

# Error-category diagnostics with these codes may be reported as warnings
STYLE_CHECK_CODES: frozenset[int] = (
    VARIABLE_DECLARED_BUT_NEVER_USED
    | PROPERTY_DECLARED_BUT_NEVER_USED
    | ALL_IMPORTS_ARE_UNUSED
    | UNREACHABLE_CODE
    | UNUSED_LABEL
    | FALL_THROUGH_CASE_IN_SWITCH
    | NOT_ALL_CODE_PATHS_RETURN_A_VALUE
)


def is_style_check(code: int | None) -> bool:
    return isinstance(code, int) and code in STYLE_CHECK_CODES
