import pytest

from core.state_snapshot import MASK_ENABLED, VISIBLE, StateSnapshot, capture_visibility
from core.tree_walker import flatten_all
from utils.session_log import SessionLog


def all_ids(host):
    return [node.layer_id for node in flatten_all(host)]


def test_capture_records_current_values(folder_host, folder_document):
    snapshot = capture_visibility(folder_host, all_ids(folder_host))
    inner = folder_document.find("Inner")
    assert len(snapshot) == 7
    assert snapshot.value(inner.layer_id, VISIBLE) is False
    assert snapshot.value(folder_document.find("red").layer_id, VISIBLE) is True


def test_snapshot_is_independent_of_live_tree(folder_host, folder_document):
    red = folder_document.find("red")
    snapshot = capture_visibility(folder_host, [red.layer_id])
    red.visible = False
    assert snapshot.value(red.layer_id, VISIBLE) is True


def test_restore_writes_values_back(folder_host, folder_document):
    snapshot = capture_visibility(folder_host, all_ids(folder_host))
    for record in folder_document.walk():
        record.visible = not record.visible

    assert snapshot.restore(folder_host) == 0
    assert folder_document.find("Inner").visible is False
    assert folder_document.find("blue").visible is True


def test_restore_is_idempotent(folder_host, folder_document):
    snapshot = capture_visibility(folder_host, all_ids(folder_host))
    folder_document.find("A/B").visible = False

    snapshot.restore(folder_host)
    first = [(r.layer_id, r.visible) for r in folder_document.walk()]
    snapshot.restore(folder_host)
    second = [(r.layer_id, r.visible) for r in folder_document.walk()]
    assert first == second


def test_restore_skips_deleted_layers(folder_host, folder_document, recorder):
    snapshot = capture_visibility(folder_host, all_ids(folder_host))
    red_id = folder_document.find("red").layer_id
    folder_document.remove(red_id)
    folder_document.find("blue").visible = False

    failures = snapshot.restore(folder_host, SessionLog(recorder.log))

    assert failures == 1
    assert folder_document.find("blue").visible is True
    assert any('"red"' in message for message in recorder.messages("WARNING"))


def test_mask_state_capture_and_restore(masked_host, masked_document):
    icons = masked_document.find("Icons")
    snapshot = StateSnapshot.capture(masked_host, [icons.layer_id], (MASK_ENABLED, VISIBLE))
    icons.mask_enabled = False
    icons.visible = False

    snapshot.restore(masked_host)
    assert icons.mask_enabled is True
    assert icons.visible is True


def test_unknown_attribute_rejected(folder_host):
    with pytest.raises(ValueError):
        StateSnapshot.capture(folder_host, [1], ("opacity",))
