import pytest

from gatewaychat.models import DEFAULT_TITLE, Message, Role, Session, derive_title


def test_message_is_immutable():
    message = Message.user("hi")
    with pytest.raises(Exception):
        message.content = "changed"


def test_message_ids_are_unique():
    assert Message.user("a").id != Message.user("a").id


def test_append_refreshes_timestamp_and_version(session):
    before = session.last_updated_at
    session.append(Message.user("hi"))
    assert session.version == 1
    assert session.last_updated_at >= before


def test_append_rejects_duplicate_ids(session):
    message = Message.user("hi")
    session.append(message)
    with pytest.raises(ValueError):
        session.append(message)


def test_remove_message(session):
    message = Message.user("hi")
    session.append(message)
    assert session.remove(message.id) is True
    assert session.messages == []
    assert session.remove(message.id) is False
    assert session.version == 2


def test_title_derived_from_long_first_user_message(session):
    text = "Hello there, this is a very long opening message exceeding fifty characters in total length"
    session.append(Message.user(text))
    assert session.title == text[:50] + "..."


def test_title_derived_from_short_message_without_ellipsis(session):
    session.append(Message.system("be nice"))
    session.append(Message.user("Short question"))
    assert session.title == "Short question"


def test_title_is_stable_once_derived(session):
    session.append(Message.user("First"))
    session.append(Message.user("Second"))
    assert session.title == "First"


def test_user_title_is_not_overwritten(session):
    session.rename("Trip planning")
    session.append(Message.user("Where should I go?"))
    assert session.title == "Trip planning"


def test_blank_rename_falls_back_to_default(session):
    session.rename("   ")
    assert session.title == DEFAULT_TITLE


def test_derive_title_exactly_fifty_characters():
    assert derive_title("x" * 50) == "x" * 50


def test_session_round_trips_through_json():
    session = Session(model_id="claude-3-5-sonnet")
    session.append(Message.user("hi"))
    session.append(Message.assistant("hello", reasoning="thought"))
    loaded = Session.model_validate(session.model_dump(mode="json"))
    assert loaded.messages == session.messages
    assert loaded.messages[1].role == Role.ASSISTANT
    assert loaded.messages[1].reasoning == "thought"


def test_renaming_to_default_placeholder_keeps_title(session):
    session.rename(DEFAULT_TITLE)
    session.append(Message.user("Where should I go?"))
    assert session.title == DEFAULT_TITLE


def test_blank_rename_reenables_derivation(session):
    session.rename("Trip")
    session.rename("")
    session.append(Message.user("Where should I go?"))
    assert session.title == "Where should I go?"


def test_title_lock_survives_persistence():
    session = Session()
    session.rename(DEFAULT_TITLE)
    loaded = Session.model_validate(session.model_dump(mode="json"))
    loaded.append(Message.user("hello"))
    assert loaded.title == DEFAULT_TITLE
