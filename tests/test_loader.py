import httpx
import pytest

from src.hopekeeper.core.errors import (
    ContentLoadError,
    DescriptorError,
    FormatError,
    MissingFieldError,
    SchemaError,
    SourceUnavailableError,
)
from src.hopekeeper.events.actions import ChangeVarAction, NoopAction
from src.hopekeeper.events.conditions import VarRangeCondition
from src.hopekeeper.events.loader import GameEventLoader


NOOP = [{"type": "noop"}]


def test_parse_events_preserves_order_and_fields(loader):
    document = [
        {
            "id": "e1",
            "trigger": "monthStart",
            "conditions": [{"type": "var_range", "var": "player.hope", "min": 10}],
            "actions": [{"type": "change_var", "var": "player.hope", "delta": -1}, {"type": "noop"}],
            "probability": 2.5,
            "exclusions": ["e2", "e3"],
            "once": True,
            "disabled": False,
        },
        {"id": "e2", "trigger": "yearStart", "actions": NOOP},
    ]
    events = loader.parse_events(document)

    assert [e.id for e in events] == ["e1", "e2"]
    first = events[0]
    assert first.trigger == "monthStart"
    assert first.conditions == (VarRangeCondition(var="player.hope", min=10),)
    assert first.actions == (ChangeVarAction(var="player.hope", delta=-1), NoopAction())
    assert first.probability == pytest.approx(2.5)
    assert first.exclusions == frozenset({"e2", "e3"})
    assert first.once is True
    assert first.disabled is False


def test_parse_event_applies_defaults(loader):
    event = loader.parse_event({"id": "e1", "trigger": "monthStart", "actions": NOOP, "flavour": "ignored"})

    assert event.probability == 1.0
    assert event.conditions == ()
    assert event.exclusions == frozenset()
    assert event.once is False
    assert event.disabled is False


def test_parse_event_tolerates_non_list_optional_fields(loader):
    event = loader.parse_event({
        "id": "e1",
        "trigger": "monthStart",
        "actions": NOOP,
        "conditions": "not a list",
        "exclusions": {"e2": True},
    })
    assert event.conditions == ()
    assert event.exclusions == frozenset()


def test_once_and_disabled_accept_truthy_values(loader):
    event = loader.parse_event({"id": "e1", "trigger": "t", "actions": NOOP, "once": 1, "disabled": "yes"})
    assert event.once is True
    assert event.disabled is True


@pytest.mark.parametrize("missing", ["id", "trigger", "actions"])
def test_parse_event_missing_required_field(loader, missing):
    record = {"id": "e1", "trigger": "monthStart", "actions": NOOP}
    del record[missing]
    with pytest.raises(MissingFieldError) as excinfo:
        loader.parse_event(record)
    assert excinfo.value.field == missing


def test_parse_event_checks_id_before_trigger(loader):
    with pytest.raises(MissingFieldError) as excinfo:
        loader.parse_event({"actions": NOOP})
    assert excinfo.value.field == "id"


def test_actions_must_be_a_list(loader):
    with pytest.raises(MissingFieldError) as excinfo:
        loader.parse_event({"id": "e1", "trigger": "t", "actions": {"type": "noop"}})
    assert excinfo.value.field == "actions"


def test_empty_actions_rejected(loader):
    with pytest.raises(SchemaError, match="at least one action"):
        loader.parse_event({"id": "e1", "trigger": "t", "actions": []})


def test_non_numeric_probability_rejected(loader):
    with pytest.raises(SchemaError, match="probability"):
        loader.parse_event({"id": "e1", "trigger": "t", "actions": NOOP, "probability": "often"})


@pytest.mark.parametrize("document", [{}, "events", 42, None])
def test_parse_events_requires_array(loader, document):
    with pytest.raises(SchemaError, match="expected array"):
        loader.parse_events(document)


def test_one_bad_record_aborts_whole_load(loader):
    document = [
        {"id": "ok", "trigger": "t", "actions": NOOP},
        {"id": "bad", "trigger": "t"},
        {"id": "ok2", "trigger": "t", "actions": NOOP},
    ]
    with pytest.raises(MissingFieldError) as excinfo:
        loader.parse_events(document)
    assert excinfo.value.location == "events[1]"
    assert "events[1]" in str(excinfo.value)


def test_unknown_action_type_reports_location(loader):
    document = [
        {"id": "ok", "trigger": "t", "actions": NOOP},
        {"id": "bad", "trigger": "t", "actions": [{"type": "noop"}, {"type": "teleport"}]},
    ]
    with pytest.raises(DescriptorError, match="teleport") as excinfo:
        loader.parse_events(document)
    assert excinfo.value.location == "events[1].actions[1]"


def test_malformed_condition_reports_location(loader):
    document = [{"id": "e", "trigger": "t", "conditions": [{"type": "has_item"}], "actions": NOOP}]
    with pytest.raises(DescriptorError) as excinfo:
        loader.parse_events(document)
    assert excinfo.value.location == "events[0].conditions[0]"


def test_non_mapping_record_is_schema_error(loader):
    with pytest.raises(SchemaError):
        loader.parse_events(["e1"])


def test_load_from_text_yaml_and_json(loader):
    yaml_text = """
- id: e1
  trigger: monthStart
  actions:
    - type: noop
"""
    json_text = '[{"id": "e1", "trigger": "monthStart", "actions": [{"type": "noop"}]}]'
    assert loader.load_from_text(yaml_text) == loader.load_from_text(json_text)


def test_load_from_text_malformed_is_format_error(loader):
    with pytest.raises(FormatError):
        loader.load_from_text("- id: e1\n  trigger: [unclosed\n")


def test_load_from_text_empty_document_is_schema_error(loader):
    with pytest.raises(SchemaError):
        loader.load_from_text("")


def test_load_errors_share_a_base(loader):
    with pytest.raises(ContentLoadError):
        loader.load_from_text("{not: [valid")


def test_load_from_path_sample_content(loader, data_dir):
    events = loader.load_from_path(data_dir / "events.yaml")
    ids = [e.id for e in events]
    assert "arrival" in ids
    assert len(ids) == len(set(ids))


def test_load_from_path_missing_file(loader, tmp_path):
    with pytest.raises(SourceUnavailableError) as excinfo:
        loader.load_from_path(tmp_path / "nope.yaml")
    assert excinfo.value.source.endswith("nope.yaml")


@pytest.mark.asyncio
async def test_async_load_from_file(loader, tmp_path):
    path = tmp_path / "events.yaml"
    path.write_text("- {id: e1, trigger: monthStart, actions: [{type: noop}]}\n")
    events = await loader.load(str(path))
    assert [e.id for e in events] == ["e1"]


@pytest.mark.asyncio
async def test_async_load_missing_file(loader, tmp_path):
    with pytest.raises(SourceUnavailableError):
        await loader.load(tmp_path / "missing.yaml")


@pytest.mark.asyncio
async def test_async_load_over_http():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/content/events.json"
        return httpx.Response(200, text='[{"id": "e1", "trigger": "t", "actions": [{"type": "noop"}]}]')

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        events = await GameEventLoader(client=client).load("https://example.test/content/events.json")
    assert [e.id for e in events] == ["e1"]


@pytest.mark.asyncio
async def test_async_load_http_error_status():
    transport = httpx.MockTransport(lambda request: httpx.Response(404, text="not found"))
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(SourceUnavailableError):
            await GameEventLoader(client=client).load("https://example.test/events.json")


@pytest.mark.asyncio
async def test_async_load_connection_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SourceUnavailableError, match="connection refused"):
            await GameEventLoader(client=client).load("http://example.test/events.json")


@pytest.mark.asyncio
async def test_async_load_http_malformed_body():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="[{id: e1"))
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(FormatError):
            await GameEventLoader(client=client).load("https://example.test/events.yaml")
