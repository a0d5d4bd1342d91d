import pytest

from tenantstats.services.statistics.status_derivation import derive_status_flags


@pytest.mark.unit
def test_archived_account_is_deleted() -> None:
    flags = derive_status_flags(True, True, "Active", 1)
    assert flags.is_deleted is True
    assert flags.is_disabled is False


@pytest.mark.unit
def test_inactive_account_is_disabled() -> None:
    flags = derive_status_flags(False, False, None)
    assert flags.is_deleted is False
    assert flags.is_disabled is True
    assert flags.is_active is False


@pytest.mark.unit
@pytest.mark.parametrize("status", ["DISABLED", "disabled", "Disabled  "])
def test_disabled_registration_status_ignores_case_and_trailing_spaces(status: str) -> None:
    flags = derive_status_flags(False, True, status, 3)
    assert flags.is_disabled is True
    assert flags.registration_status == status
    assert flags.registration_status_id == 3


@pytest.mark.unit
@pytest.mark.parametrize("status", [" DISABLED", "\tdisabled", "DISABLED\t", "DISABLEDX"])
def test_leading_whitespace_or_other_suffix_is_not_disabled(status: str) -> None:
    flags = derive_status_flags(False, True, status)
    assert flags.is_disabled is False


@pytest.mark.unit
def test_missing_inputs_yield_false_flags_and_pass_through_nulls() -> None:
    flags = derive_status_flags(None, None, None)
    assert flags.is_deleted is False
    assert flags.is_disabled is False
    assert flags.is_active is None
    assert flags.registration_status is None
    assert flags.registration_status_id is None
