import pytest

from tenantstats.constants.stats_constants import MembershipSource
from tenantstats.services.statistics.role_labels import build_role_label, resolve_role_name


@pytest.mark.unit
def test_resolve_role_name_maps_numeric_and_guid_codes() -> None:
    assert resolve_role_name("1") == "Eier"
    assert resolve_role_name(" 2 ") == "Medlem"
    assert resolve_role_name("302c99e3-e66c-4bca-b2c9-47d70d8d55c8") == "Eier"
    assert resolve_role_name("7DCE6E4E-C17E-43EF-9E73-3A780D52C927") == "Regnskapsfører"


@pytest.mark.unit
def test_resolve_role_name_falls_back_for_unknown_or_missing_code() -> None:
    assert resolve_role_name("42") == "RoleId 42"
    assert resolve_role_name(None) == "RoleId ukjent"
    assert resolve_role_name("   ") == "RoleId ukjent"


@pytest.mark.unit
def test_build_role_label_appends_flags_in_fixed_order() -> None:
    label = build_role_label(MembershipSource.REGISTRATION, "1", True, True)
    assert label == "Registration: Eier [Default, RegisteredAs]"

    assert build_role_label(MembershipSource.CAPASSA, "2", False, None) == "Capassa: Medlem"
    assert build_role_label(MembershipSource.CAPASSA, "2", None, True) == "Capassa: Medlem [RegisteredAs]"


@pytest.mark.unit
def test_build_role_label_uses_unknown_source_when_blank() -> None:
    assert build_role_label(None, "3", True, False) == "Unknown: Investor [Default]"
    assert build_role_label("  ", "3", None, None) == "Unknown: Investor"
