from goods_issue.services.feedback import Feedback, FeedbackSlot, Severity
from goods_issue.services.issue_errors import StockExceeded


class _Clock:
    def __init__(self):
        self.now = 10.0

    def __call__(self):
        return self.now


def test_feedback_slot_clears_after_timeout():
    clock = _Clock()
    slot = FeedbackSlot(clock=clock)
    slot.show(Feedback.success("Saved", timeout_ms=500))

    clock.now = 10.4
    assert slot.current.message == "Saved"

    clock.now = 10.5
    assert slot.current is None


def test_new_feedback_replaces_previous_one():
    slot = FeedbackSlot(clock=_Clock())
    slot.show(Feedback.warning("first"))
    slot.show(Feedback.error("second"))

    assert slot.current.message == "second"
    slot.clear()
    assert slot.current is None


def test_feedback_serializes_severity_as_type():
    assert Feedback.error("Boom", 5000).to_dict() == {"message": "Boom", "type": "error", "timeout_ms": 5000}


def test_stock_exceeded_names_item_and_limit():
    feedback = StockExceeded("X1", "Paper", 2.5).to_feedback()

    assert feedback.severity is Severity.ERROR
    assert feedback.message == "Item Paper (X1) only has 2.5 available. Please adjust the quantity."
