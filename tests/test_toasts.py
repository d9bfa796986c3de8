import asyncio

import pytest

from client.notifications import (
    APPLICANT_STATUS,
    EMPLOYER_APPLY,
    build_message,
    detail_path,
    parse_notification,
    toast_variant,
)
from client.toasts import IDLE, PRESENTING, ToastQueue


def status_item(id, status="accepted", title="Backend Engineer"):
    job = {"id": 100 + id, "title": title, "company": "ACME"} if title is not None else None
    return parse_notification({"id": id, "status": status, "job": job}, APPLICANT_STATUS)


def apply_item(id, name="Alice", title="Backend Engineer"):
    return parse_notification(
        {"id": id, "job": {"id": 7, "title": title}, "applicant": {"id": 50 + id, "name": name}},
        EMPLOYER_APPLY,
    )


class Recorder:
    def __init__(self):
        self.shown = []
        self.paths = []

    def present(self, toast):
        self.shown.append(toast)

    def navigate(self, path):
        self.paths.append(path)

    @property
    def visible(self):
        return [toast.item.id for toast in self.shown if toast is not None]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def queue(fake_api, recorder):
    return ToastQueue(fake_api, presenter=recorder.present, navigate=recorder.navigate, duration=0)


def test_messages_per_kind_and_status():
    assert build_message(status_item(1, "accepted")) == '🎉 Your application for "Backend Engineer" was ACCEPTED'
    assert build_message(status_item(1, "rejected")) == '❌ Your application for "Backend Engineer" was REJECTED'
    assert build_message(status_item(1, "pending", title=None)) == "Update on your job"
    assert build_message(apply_item(1)) == '👤 Alice applied for "Backend Engineer"'
    assert build_message(apply_item(1, name=None, title=None)) == "👤 Someone applied for your job"


def test_variants_and_detail_paths():
    assert toast_variant(status_item(1, "accepted")) == "success"
    assert toast_variant(status_item(1, "rejected")) == "error"
    assert toast_variant(apply_item(1)) == "info"
    assert detail_path(status_item(1)) == "/my-applications"
    assert detail_path(apply_item(1)) == "/jobs/7/applicants"


def test_parse_accepts_camel_case_payload():
    item = parse_notification(
        {"id": 3, "status": "accepted", "statusUpdatedAt": "2024-05-01T10:00:00", "job": {"id": 1}},
        APPLICANT_STATUS,
    )
    assert item.key == "applicant_status:3"
    assert item.status_updated_at.year == 2024


async def test_queue_presents_one_at_a_time_in_order(queue, recorder):
    assert queue.state == IDLE
    queue.enqueue([status_item(1), status_item(2), status_item(3)])

    assert queue.state == PRESENTING
    assert queue.active.id == 1
    assert [item.id for item in queue.pending] == [2, 3]

    queue.dismiss()
    assert queue.active.id == 2
    queue.dismiss()
    queue.dismiss()

    assert queue.state == IDLE
    assert recorder.visible == [1, 2, 3]


async def test_enqueue_while_presenting_waits(queue):
    queue.enqueue([status_item(1)])
    queue.enqueue([status_item(2)])
    assert queue.active.id == 1
    assert [item.id for item in queue.pending] == [2]


async def test_dismiss_does_not_mark_seen(queue, fake_api, recorder):
    queue.enqueue([status_item(1)])
    queue.dismiss()

    assert fake_api.calls == []
    assert recorder.paths == []
    assert recorder.shown[-1] is None


async def test_acknowledge_applicant_item(fake_api, recorder):
    refreshed = []

    async def refresh():
        refreshed.append(True)

    queue = ToastQueue(fake_api, presenter=recorder.present, navigate=recorder.navigate,
                       on_applicant_seen=refresh, duration=0)
    queue.enqueue([status_item(1), status_item(2)])

    await queue.acknowledge()

    assert fake_api.calls == [("mark_application_seen", 1)]
    assert refreshed == [True]
    assert recorder.paths == ["/my-applications"]
    assert queue.active.id == 2


async def test_acknowledge_employer_item(queue, fake_api, recorder):
    queue.enqueue([apply_item(4)])

    await queue.acknowledge()

    assert fake_api.calls == [("mark_employer_seen", 4)]
    assert recorder.paths == ["/jobs/7/applicants"]
    assert queue.state == IDLE


async def test_acknowledge_failure_still_moves_on(queue, fake_api, recorder):
    fake_api.fail_marks = True
    queue.enqueue([status_item(1), status_item(2)])

    await queue.acknowledge()

    assert recorder.paths == ["/my-applications"]
    assert queue.active.id == 2


async def test_acknowledge_when_idle_is_a_noop(queue, fake_api):
    await queue.acknowledge()
    assert fake_api.calls == []


async def test_toast_auto_dismisses_after_duration(fake_api, recorder):
    queue = ToastQueue(fake_api, presenter=recorder.present, duration=0.01)
    queue.enqueue([status_item(1), status_item(2)])
    assert recorder.shown[0].duration == 0.01

    await asyncio.sleep(0.05)

    assert recorder.visible == [1, 2]
    assert queue.state == IDLE
    # auto-dismiss is not acknowledgement
    assert fake_api.calls == []


async def test_clear_drops_everything(queue, recorder):
    queue.enqueue([status_item(1), status_item(2)])
    queue.clear()

    assert queue.state == IDLE
    assert queue.pending == []
    assert recorder.shown[-1] is None


async def test_acknowledge_finishing_after_clear_has_no_effect(fake_api, recorder):
    release = asyncio.Event()
    refreshed = []

    async def slow_mark(application_id):
        await release.wait()
        return {"id": application_id, "isSeenByApplicant": True}

    async def refresh():
        refreshed.append(True)

    fake_api.mark_application_seen = slow_mark
    queue = ToastQueue(fake_api, presenter=recorder.present, navigate=recorder.navigate,
                       on_applicant_seen=refresh, duration=0)
    queue.enqueue([status_item(1)])

    in_flight = asyncio.create_task(queue.acknowledge())
    await asyncio.sleep(0)
    queue.clear()
    queue.enqueue([status_item(2)])
    release.set()
    await in_flight

    assert recorder.paths == []
    assert refreshed == []
    # the next session's toast is left alone
    assert queue.active.id == 2
