from decimal import Decimal

import pytest

from api_spec_meta.errors import DefaultValueParseFailureError, DefaultValueTypeConversionError
from api_spec_meta.meta.base import ArrayType, EnumCandidate, EnumType, MapType, OpaqueType, PropertyNode, ScalarType
from api_spec_meta.spec.defaults import DefaultValueMiner, extract_example, parse_map_style


def _derive(node: PropertyNode):
    return DefaultValueMiner().derive_default(node)


def _string(comment: str):
    return _derive(PropertyNode(name="sea_name", type_name="str", declared_type=ScalarType(scalar="str"), documentation=comment))


def _scalar(scalar: str, comment: str):
    return _derive(PropertyNode(name="sea_count", type_name=scalar, declared_type=ScalarType(scalar=scalar), documentation=comment))


def _list(element, comment: str):
    return _derive(PropertyNode(name="sea_list", type_name="list", declared_type=ArrayType(element=element), documentation=comment))


def _map(comment: str, key_type: str | None = "str", value_type: str | None = "str"):
    declared = MapType(key_type=key_type, value_type=value_type)
    return _derive(PropertyNode(name="sea_map", type_name="dict", declared_type=declared, documentation=comment))


STR = ScalarType(scalar="str")
INT = ScalarType(scalar="int")


class TestStringDefault:
    def test_basic(self):
        assert _string("Sea Name e.g. SeaOfDreams") == "SeaOfDreams"
        assert _string("Sea Name e.g. SeaOfDreams (NullAllowed)") == "SeaOfDreams"
        assert _string("Sea Name e.g. 1.2") == "1.2"
        assert _string("e.g. SeaOfDreams") == "SeaOfDreams"
        assert _string(" e.g. SeaOfDreams") == "SeaOfDreams"

    def test_unquoted_value_ends_at_space(self):
        assert _string("Sea Name e.g. Sea of Dreams") == "Sea"

    def test_leading_spaces(self):
        assert _string("Sea Name e.g.SeaOfDreams") == "SeaOfDreams"
        assert _string("Sea Name e.g.  SeaOfDreams") == "SeaOfDreams"
        assert _string("Sea Name e.g.   SeaOfDreams") == "SeaOfDreams"
        assert _string("Sea Name e.g.    SeaOfDreams") is None
        assert _string("Sea Namee.g. SeaOfDreams") == "SeaOfDreams"

    def test_quoted(self):
        assert _string('Sea Name e.g. "Sea of Dreams"') == "Sea of Dreams"
        assert _string('Sea Name e.g. "Sea of Dreams" (NullAllowed)') == "Sea of Dreams"
        assert _string('Sea Name e.g. "Sea of Dreams') == "Sea of Dreams"
        assert _string('Sea Name e.g. Dreams"') == 'Dreams"'
        assert _string('Sea Name e.g. "Sea" of Dreams') == "Sea"
        assert _string('Sea Name e.g. "Sea.e.g.Dreams"') == "Sea.e.g.Dreams"

    def test_none(self):
        assert _string("Sea Name e.g. null") is None
        assert _string("Sea Name e.g. NULL") == "NULL"
        assert _string("Sea Name Sea of Dreams") is None
        assert _string("Sea Name e.g.") is None
        assert _string("Sea Name e.g Sea of Dreams") is None
        assert _string("Sea Name e. g. Sea of Dreams") is None
        assert _string(None) is None

    def test_line_breaks_are_spaces(self):
        assert _string("Sea Name e.g.\nSeaOfDreams") == "SeaOfDreams"
        assert _string("Sea Name e.g.\r\n\r\nSeaOfDreams") == "SeaOfDreams"
        assert _string("Sea Name e.g.\tSeaOfDreams") == "\tSeaOfDreams"

    def test_brackets_and_braces(self):
        assert _string("Sea Name e.g. [Sea of Dreams]") == ["Sea of Dreams"]
        assert _string("Sea Name e.g. {Sea of Dreams}") == "{Sea"


class TestNumberDefault:
    def test_integer(self):
        assert _scalar("int", "Sea Count e.g. 1") == 1
        assert _scalar("int", "Sea Count e.g. 123456789") == 123456789
        assert _scalar("Int64", "Sea Count e.g. 1234567890123456") == 1234567890123456

    def test_decimal(self):
        assert _scalar("Decimal", "Sea Count e.g. 1") == Decimal("1")
        assert _scalar("Decimal", "Sea Count e.g. 1.2") == Decimal("1.2")

    def test_integer_rejects_decimal_text(self):
        with pytest.raises(DefaultValueTypeConversionError):
            _scalar("int", "Sea Count e.g. 1.0")

    def test_integer_rejects_words(self):
        with pytest.raises(DefaultValueTypeConversionError) as excinfo:
            _scalar("int", "Sea Count e.g. mystic")
        assert excinfo.value.property_name == "sea_count"
        assert "mystic" in str(excinfo.value)

    def test_integer_range(self):
        with pytest.raises(DefaultValueTypeConversionError):
            _scalar("int", "Sea Count e.g. 1234567890123456")

    def test_boolean(self):
        assert _scalar("bool", "Sea Flag e.g. true") is True
        assert _scalar("bool", "Sea Flag e.g. FALSE") is False
        with pytest.raises(DefaultValueTypeConversionError):
            _scalar("bool", "Sea Flag e.g. yes")


class TestDateDefault:
    def test_date_without_example_uses_pattern(self):
        assert _scalar("date", "Opened Date") == "2000-01-01"
        assert _scalar("datetime", None) == "2000-01-01T00:00:00.000"
        assert _scalar("time", None) == "00:00:00.000"

    def test_date_example_is_kept(self):
        assert _scalar("date", "Opened Date e.g. 2022-04-18") == "2022-04-18"


class TestListDefault:
    def test_basic(self):
        assert _list(STR, "Sea List e.g. [dockside, hangar]") == ["dockside", "hangar"]
        assert _list(STR, "Sea List e.g. [mystic]") == ["mystic"]
        assert _list(STR, 'Sea List e.g. ["dockside", "hangar"]') == ["dockside", "hangar"]
        assert _list(STR, 'Sea List e.g. ["dockside","hangar"]') == ["dockside", "hangar"]
        assert _list(STR, 'Sea List e.g.["dockside", "hangar"]') == ["dockside", "hangar"]
        assert _list(STR, "Sea List e.g. [dockside, hangar] rear comment") == ["dockside", "hangar"]
        assert _list(STR, "e.g. [dockside, hangar]") == ["dockside", "hangar"]

    def test_element_spaces(self):
        assert _list(STR, "Sea List e.g. [dock side, han gar]") == ["dock side", "han gar"]
        assert _list(STR, 'Sea List e.g. [  "dockside" , "hangar" ]') == ["dockside", "hangar"]
        assert _list(STR, 'Sea List e.g. ["dockside, hangar"]') == ['"dockside', 'hangar"']

    def test_integer_elements(self):
        assert _list(INT, "Sea List e.g. [1, 2]") == [1, 2]
        assert _list(INT, 'Sea List e.g. ["1", "2"]') == [1, 2]
        with pytest.raises(DefaultValueTypeConversionError):
            _list(INT, 'Sea List e.g. ["1", "hangar"]')

    def test_untyped_elements_are_strings(self):
        assert _list(OpaqueType(), 'Sea List e.g. ["dockside", "hangar"]') == ["dockside", "hangar"]

    def test_enum_elements_are_verbatim(self):
        element = EnumType(title="Harbor", candidates=[EnumCandidate(code="dockside", name="DOCKSIDE")])
        assert _list(element, "Harbors e.g. [dockside, unknown]") == ["dockside", "unknown"]

    def test_broken(self):
        assert _list(STR, 'Sea List e.g. "dockside", "hangar"') is None
        assert _list(STR, "Sea List e.g. [dock[side, hangar]") == ["dock[side", "hangar"]
        assert _list(STR, "Sea List e.g. [dock]side, hangar]") == ["dock"]
        assert _list(STR, 'Sea List e.g. ["dockside", "hangar"') == ["dockside", "hangar"]
        assert _list(STR, "Sea List") is None

    def test_expanded_list_has_no_default(self):
        node = PropertyNode(
            name="beans",
            declared_type=ArrayType(element=STR),
            documentation="Beans e.g. [a, b]",
            children=[PropertyNode(name="child")],
        )
        assert _derive(node) is None


class TestMapDefault:
    def test_brace_map(self):
        assert _map("Sea Map e.g. {dockside:over,hangar:mystic}") == {"dockside": "over", "hangar": "mystic"}
        assert _map("Sea Map e.g. {dockside:/over/the/waves.jpg,hangar:mys_tic}") == {
            "dockside": "/over/the/waves.jpg",
            "hangar": "mys_tic",
        }
        assert _map("Sea Map e.g. {dockside : over, hangar : mystic}") == {"dockside": "over", "hangar": "mystic"}
        assert _map("Sea Map e.g. {dock side:over the waves,han gar:mys tic}") == {
            "dock side": "over the waves",
            "han gar": "mys tic",
        }

    def test_quoted_entries(self):
        assert _map('Sea Map e.g. {"dockside":"over"}') == {"dockside": "over"}
        assert _map("Sea Map e.g. {'dockside':'over','hangar':'mystic'}") == {"dockside": "over", "hangar": "mystic"}
        assert _map("Sea Map e.g. \"{'dockside':'over','hangar':'mystic'}\" (NullAllowed)") == {
            "dockside": "over",
            "hangar": "mystic",
        }

    def test_spaces_and_rear_comment(self):
        assert _map("e.g.{dockside:over}") == {"dockside": "over"}
        assert _map("e.g.  {dockside:over}") == {"dockside": "over"}
        assert _map("Sea Map e.g. {dockside:over,hangar:mystic} (NullAllowed)") == {"dockside": "over", "hangar": "mystic"}

    def test_none(self):
        assert _map("Sea Map") is None
        assert _map("Sea Map e.g.") is None
        assert _map("Sea Map e.g. {}") == {}
        assert _map("e.g. dockside:over") is None
        assert _map("e.g. [dockside:over]") is None
        assert _map("e.g. {dockside:over}", key_type=None, value_type=None) is None

    def test_unclosed(self):
        assert _map("Sea Map e.g. {dockside:over") == {"dockside": "over"}
        assert _map("Sea Map e.g. {dockside:over the waves") == {"dockside": "over the waves"}

    def test_entry_without_colon_fails(self):
        with pytest.raises(DefaultValueParseFailureError):
            _map("Sea Map e.g. {dockside=over")
        with pytest.raises(DefaultValueParseFailureError):
            _map("Sea Map e.g. {dockside:[over,the]}")

    def test_nested_braces_stay_flat(self):
        assert _map("Sea Map e.g. {dockside:{over:waves,table:waiting},hangar:mystic}") == {
            "dockside": "{over",
            "table": "waiting}",
            "hangar": "mystic",
        }

    def test_map_style(self):
        comment = "Sea Map e.g. map:{dockside = map:{over =waves;table= waiting}; hangar =mystic} (NullAllowed)"
        assert _map(comment) == {"dockside": {"over": "waves", "table": "waiting"}, "hangar": "mystic"}

    def test_broken_map_style_is_none(self):
        assert parse_map_style("map:{dockside over}") is None


class TestEnumDefault:
    def test_first_candidate_without_example(self):
        declared = EnumType(
            title="Harbor",
            candidates=[EnumCandidate(code="dockside", name="DOCKSIDE"), EnumCandidate(code="hangar", name="HANGAR")],
        )
        assert _derive(PropertyNode(name="harbor", declared_type=declared)) == "dockside"
        assert _derive(PropertyNode(name="harbor", declared_type=declared, documentation="e.g. hangar")) == "hangar"


class TestExtractExample:
    def test_map_forms_need_allow_map(self):
        assert extract_example("e.g. {a:b}") == "{a:b}"
        assert extract_example("e.g. {a:b}", allow_map=True) == {"a": "b"}
        assert extract_example("e.g. map:{a = b}", allow_map=True) == {"a": "b"}
