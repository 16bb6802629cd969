import pytest

from src.hopekeeper.core.errors import DescriptorError
from src.hopekeeper.events.actions import (
    ActionFactory,
    ChoiceAction,
    GiveItemAction,
    MessageAction,
    action_factory,
)
from src.hopekeeper.events.conditions import (
    AnyCondition,
    ConditionFactory,
    HasItemCondition,
    NotCondition,
    VarRangeCondition,
    condition_factory,
)
from src.hopekeeper.state.prompts import ChoicePrompt, MessagePrompt


@pytest.mark.parametrize("descriptor", [
    None,
    "var_range",
    ["type", "var_range"],
    {},
    {"type": None},
    {"type": "no_such_condition"},
    {"type": 7},
])
def test_condition_factory_rejects_bad_discriminant(descriptor):
    with pytest.raises(DescriptorError):
        condition_factory.from_descriptor(descriptor)


@pytest.mark.parametrize("descriptor", [
    {"type": "var_range"},
    {"type": "var_range", "var": 3},
    {"type": "var_range", "var": "x", "min": "low"},
    {"type": "var_range", "var": "x", "min": 5, "max": 1},
    {"type": "has_item", "item": "bread", "count": 0},
    {"type": "has_item", "item": "bread", "count": True},
    {"type": "has_status"},
    {"type": "not"},
    {"type": "not", "condition": {"type": "bogus"}},
    {"type": "any", "conditions": []},
])
def test_condition_factory_rejects_malformed_fields(descriptor):
    with pytest.raises(DescriptorError):
        condition_factory.from_descriptor(descriptor)


@pytest.mark.parametrize("descriptor", [
    {"type": "set_var", "var": "x"},
    {"type": "change_var", "delta": 1},
    {"type": "give_item"},
    {"type": "take_item", "item": "bread", "count": -2},
    {"type": "add_status", "status": ["sick"]},
    {"type": "message"},
    {"type": "choice", "text": "t", "choices": []},
    {"type": "choice", "text": "t", "choices": [{"label": "a"}]},
    {"type": "choice", "text": "t", "choices": [{"label": "a", "id": 0}, {"label": "b", "id": 0}]},
    {"type": "choice", "text": "t", "choices": [{"label": "a", "id": 0, "actions": [{"type": "nope"}]}]},
])
def test_action_factory_rejects_malformed_fields(descriptor):
    with pytest.raises(DescriptorError):
        action_factory.from_descriptor(descriptor)


def test_factory_builds_nested_conditions():
    condition = condition_factory.from_descriptor({
        "type": "any",
        "conditions": [
            {"type": "has_item", "item": "lantern"},
            {"type": "not", "condition": {"type": "var_range", "var": "player.hope", "min": 50}},
        ],
    })
    assert condition == AnyCondition(conditions=(
        HasItemCondition(item="lantern"),
        NotCondition(condition=VarRangeCondition(var="player.hope", min=50)),
    ))


def test_registering_duplicate_kind_fails():
    factory = ConditionFactory()
    factory.register("var_range", VarRangeCondition.from_descriptor)
    with pytest.raises(ValueError):
        factory.register("var_range", VarRangeCondition.from_descriptor)


def test_custom_factory_only_knows_registered_kinds():
    factory = ActionFactory()
    factory.register("give_item", GiveItemAction.from_descriptor)
    assert factory.kinds() == ["give_item"]
    with pytest.raises(DescriptorError):
        factory.from_descriptor({"type": "noop"})


def test_var_range_condition(game_state):
    assert VarRangeCondition("player.hope", min=60, max=60).evaluate(game_state)
    assert VarRangeCondition("player.hope", max=59).evaluate(game_state) is False
    assert VarRangeCondition("player.hope").evaluate(game_state)


def test_conditions_do_not_mutate_state(game_state):
    condition = condition_factory.from_descriptor({
        "type": "any",
        "conditions": [{"type": "has_item", "item": "bread", "count": 2}, {"type": "has_status", "status": "sick"}],
    })
    before = (game_state.get_var("player.hope"), game_state.player_inventory.items, game_state.player_status.items)
    assert condition.evaluate(game_state) is False
    after = (game_state.get_var("player.hope"), game_state.player_inventory.items, game_state.player_status.items)
    assert before == after


def test_variable_actions_clamp(game_state):
    action_factory.from_descriptor({"type": "change_var", "var": "player.hope", "delta": 500}).execute(game_state)
    assert game_state.get_var("player.hope") == 100
    action_factory.from_descriptor({"type": "set_var", "var": "player.hope", "value": -3}).execute(game_state)
    assert game_state.get_var("player.hope") == 0


def test_item_and_status_actions(game_state):
    action_factory.from_descriptor({"type": "give_item", "item": "bread", "count": 3}).execute(game_state)
    action_factory.from_descriptor({"type": "take_item", "item": "bread"}).execute(game_state)
    action_factory.from_descriptor({"type": "add_status", "status": "sick"}).execute(game_state)

    assert game_state.player_inventory.count("bread") == 2
    assert HasItemCondition("bread", count=2).evaluate(game_state)
    assert "sick" in game_state.player_status

    action_factory.from_descriptor({"type": "remove_status", "status": "sick"}).execute(game_state)
    assert "sick" not in game_state.player_status


def test_give_unknown_item_fails_at_execution(game_state):
    action = action_factory.from_descriptor({"type": "give_item", "item": "dragon_egg"})
    with pytest.raises(ValueError):
        action.execute(game_state)


def test_message_action_queues_prompt(game_state):
    action = action_factory.from_descriptor({"type": "message", "text": "message.hello", "icon": "img/x.png"})
    assert action == MessageAction(text="message.hello", icon="img/x.png")
    action.execute(game_state)
    assert game_state.take_prompts() == [MessagePrompt("message.hello", "message.ok", "img/x.png")]


def test_choice_action_queues_prompt_with_branches(game_state):
    action = action_factory.from_descriptor({
        "type": "choice",
        "text": "message.stranger",
        "choices": [
            {"label": "choice.yes", "id": 1, "actions": [{"type": "give_item", "item": "lantern"}]},
            {"label": "choice.no", "id": 2},
        ],
    })
    assert isinstance(action, ChoiceAction)
    action.execute(game_state)
    (prompt,) = game_state.take_prompts()
    assert isinstance(prompt, ChoicePrompt)
    assert [o.id for o in prompt.options] == [1, 2]
    assert prompt.option(1).actions == (GiveItemAction(item="lantern"),)
    assert prompt.option(2).actions == ()
    with pytest.raises(ValueError):
        prompt.option(3)
