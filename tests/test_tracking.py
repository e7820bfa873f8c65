"""Delivery tracker timestamp rules and campaign statistics."""

import pytest

from emailmarketer.core.errors import ValidationError
from emailmarketer.modules.campaigns.models import create_campaign
from emailmarketer.modules.tracking import DeliveryTracker, get_campaign_stats, normalize_message_id


@pytest.fixture
def campaign(db, owner):
    return create_campaign(db, owner['id'], {
        'name': 'Spring', 'subject': 'Hi', 'htmlContent': '<p>Hi</p>'
    })


@pytest.fixture
def tracker(db):
    return DeliveryTracker(db)


def test_new_record_is_queued_without_timestamps(tracker, campaign):
    record = tracker.get(tracker.create(campaign['id'], 1, 'a@example.com'))
    assert record['status'] == 'queued'
    assert record['email'] == 'a@example.com'
    for column in ('sent_at', 'delivered_at', 'opened_at', 'clicked_at', 'bounced_at'):
        assert record[column] is None


def test_update_sets_own_timestamp_and_message_id(tracker, campaign):
    record_id = tracker.create(campaign['id'], 1, 'a@example.com')
    tracker.update_status(record_id, 'sent', message_id='<abc@mg.example.com>')

    record = tracker.get(record_id)
    assert record['status'] == 'sent'
    assert record['sent_at'] is not None
    assert record['message_id'] == 'abc@mg.example.com', "angle brackets must be stripped"


def test_opened_then_clicked_keeps_opened_timestamp(tracker, campaign):
    record_id = tracker.create(campaign['id'], 1, 'a@example.com')
    tracker.update_status(record_id, 'sent', message_id='m1')
    tracker.update_status(record_id, 'opened')
    opened_at = tracker.get(record_id)['opened_at']

    tracker.update_status(record_id, 'clicked')
    record = tracker.get(record_id)
    assert record['status'] == 'clicked'
    assert record['clicked_at'] is not None
    assert record['opened_at'] == opened_at
    assert record['sent_at'] is not None


def test_status_overwrite_is_not_monotonic(tracker, campaign):
    """opened after bounced is applied; bounced_at survives."""
    record_id = tracker.create(campaign['id'], 1, 'a@example.com')
    tracker.update_status(record_id, 'bounced')
    tracker.update_status(record_id, 'opened')

    record = tracker.get(record_id)
    assert record['status'] == 'opened'
    assert record['bounced_at'] is not None
    assert record['opened_at'] is not None


def test_unsubscribed_stamps_nothing(tracker, campaign):
    record_id = tracker.create(campaign['id'], 1, 'a@example.com')
    tracker.update_status(record_id, 'unsubscribed')
    record = tracker.get(record_id)
    assert record['status'] == 'unsubscribed'
    assert all(record[c] is None for c in ('sent_at', 'opened_at', 'bounced_at', 'failed_at'))


def test_failed_records_error_message(tracker, campaign):
    record_id = tracker.create(campaign['id'], 1, 'a@example.com')
    tracker.update_status(record_id, 'failed', error='mailbox full')
    record = tracker.get(record_id)
    assert record['status'] == 'failed'
    assert record['failed_at'] is not None
    assert record['error_message'] == 'mailbox full'


def test_unknown_status_is_rejected(tracker, campaign):
    record_id = tracker.create(campaign['id'], 1, 'a@example.com')
    with pytest.raises(ValidationError):
        tracker.update_status(record_id, 'exploded')


def test_find_by_message_id_normalizes_brackets(tracker, campaign):
    record_id = tracker.create(campaign['id'], 1, 'a@example.com')
    tracker.update_status(record_id, 'sent', message_id='xyz@mg.example.com')

    assert tracker.find_by_message_id('<xyz@mg.example.com>')['id'] == record_id
    assert tracker.find_by_message_id('xyz@mg.example.com')['id'] == record_id
    assert tracker.find_by_message_id('nope@mg.example.com') is None
    assert tracker.find_by_message_id(None) is None


def test_normalize_message_id():
    assert normalize_message_id(' <a@b> ') == 'a@b'
    assert normalize_message_id('a@b') == 'a@b'
    assert normalize_message_id('') is None


def test_campaign_stats_are_zero_filled(db, tracker, campaign):
    first = tracker.create(campaign['id'], 1, 'a@example.com')
    second = tracker.create(campaign['id'], 2, 'b@example.com')
    tracker.create(campaign['id'], 3, 'c@example.com')
    tracker.update_status(first, 'delivered')
    tracker.update_status(second, 'delivered')

    stats = get_campaign_stats(db, campaign['id'])
    assert stats['total'] == 3
    assert stats['delivered'] == 2
    assert stats['queued'] == 1
    assert stats['opened'] == 0
    assert stats['failed'] == 0


def test_list_for_campaign_returns_records_in_creation_order(tracker, campaign):
    tracker.create(campaign['id'], 1, 'a@example.com')
    tracker.create(campaign['id'], 2, 'b@example.com')
    emails = [r['email'] for r in tracker.list_for_campaign(campaign['id'])]
    assert emails == ['a@example.com', 'b@example.com']
