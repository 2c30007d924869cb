"""
Tests for content-changed notifications: same-process delivery, the shared
storage channel between views, and debouncing.
"""
import json
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from steelbuckle.utils.broadcast import (
    STORAGE_KEY_PREFIX,
    ContentBus,
    Debouncer,
    InMemoryBroadcaster,
    SharedStorage,
    StorageBroadcaster,
)


class TestInMemoryBus(unittest.TestCase):

    def setUp(self):
        self.bus = ContentBus()
        self.received = []

    def test_handler_receives_scope_and_timestamp(self):
        self.bus.on_content_changed('translations', self.received.append)
        payload = self.bus.notify_content_changed('translations')
        self.assertEqual(self.received, [payload])
        self.assertEqual(payload['scope'], 'translations')
        self.assertIsInstance(payload['timestamp'], int)

    def test_only_matching_scope_is_delivered(self):
        self.bus.on_content_changed('media', self.received.append)
        self.bus.notify_content_changed('colorScheme')
        self.assertEqual(self.received, [])

    def test_unknown_scope_raises(self):
        with self.assertRaises(ValueError):
            self.bus.notify_content_changed('projects')
        with self.assertRaises(ValueError):
            self.bus.on_content_changed('projects', self.received.append)

    def test_unsubscribe_stops_delivery(self):
        unsubscribe = self.bus.on_content_changed('media', self.received.append)
        unsubscribe()
        unsubscribe()
        self.bus.notify_content_changed('media')
        self.assertEqual(self.received, [])

    def test_failing_handler_does_not_block_others(self):
        def broken(_payload):
            raise RuntimeError('boom')

        self.bus.on_content_changed('media', broken)
        self.bus.on_content_changed('media', self.received.append)
        self.bus.notify_content_changed('media')
        self.assertEqual(len(self.received), 1)

    def test_details_are_carried_in_payload(self):
        self.bus.on_content_changed('colorScheme', self.received.append)
        self.bus.notify_content_changed('colorScheme', schemeId='green')
        self.assertEqual(self.received[0]['schemeId'], 'green')

    def test_versions_increase_per_scope(self):
        self.assertEqual(self.bus.versions(), {'translations': 0, 'media': 0, 'colorScheme': 0})
        first = self.bus.notify_content_changed('media')['timestamp']
        second = self.bus.notify_content_changed('media')['timestamp']
        self.assertGreater(second, first)
        versions = self.bus.versions()
        self.assertEqual(versions['media'], second)
        self.assertEqual(versions['translations'], 0)


class TestSharedStorageChannel(unittest.TestCase):

    def setUp(self):
        self.storage = SharedStorage()
        self.view_a = StorageBroadcaster(self.storage)
        self.view_b = StorageBroadcaster(self.storage)
        self.view_c = StorageBroadcaster(self.storage)

    def test_other_views_receive_the_write(self):
        got_a, got_b, got_c = [], [], []
        self.view_a.subscribe('translations', got_a.append)
        self.view_b.subscribe('translations', got_b.append)
        self.view_c.subscribe('translations', got_c.append)

        self.view_a.publish('translations', {'scope': 'translations', 'timestamp': 1})

        self.assertEqual(got_a, [])
        self.assertEqual(got_b, [{'scope': 'translations', 'timestamp': 1}])
        self.assertEqual(got_c, [{'scope': 'translations', 'timestamp': 1}])

    def test_key_is_removed_right_after_publishing(self):
        self.view_a.publish('media', {'scope': 'media', 'timestamp': 1})
        self.assertIsNone(self.storage.get_item(f"{STORAGE_KEY_PREFIX}media"))

    def test_unrelated_and_malformed_keys_are_ignored(self):
        got = []
        self.view_b.subscribe('media', got.append)
        self.storage.set_item('site.colorScheme', 'blue', source=self.view_a)
        self.storage.set_item(f"{STORAGE_KEY_PREFIX}media", 'not json', source=self.view_a)
        self.assertEqual(got, [])

    def test_closed_view_stops_receiving(self):
        got = []
        self.view_b.subscribe('media', got.append)
        self.view_b.close()
        self.view_a.publish('media', {'scope': 'media', 'timestamp': 1})
        self.assertEqual(got, [])

    def test_raw_event_carries_json_payload(self):
        events = []

        class Listener:
            def on_storage_event(self, key, old, new):
                events.append((key, old, new))

        self.storage.attach(Listener())
        self.view_a.publish('media', {'scope': 'media', 'timestamp': 7})
        key = f"{STORAGE_KEY_PREFIX}media"
        self.assertEqual(events[0][0], key)
        self.assertEqual(json.loads(events[0][2]), {'scope': 'media', 'timestamp': 7})
        # The removal is announced as well, with no new value
        self.assertEqual(events[1][0], key)
        self.assertIsNone(events[1][2])

    def test_buses_in_two_views_reach_each_other(self):
        bus_a = ContentBus(local=InMemoryBroadcaster(), shared=self.view_a)
        bus_b = ContentBus(local=InMemoryBroadcaster(), shared=self.view_b)
        got_a, got_b = [], []
        bus_a.on_content_changed('translations', got_a.append)
        bus_b.on_content_changed('translations', got_b.append)

        payload = bus_a.notify_content_changed('translations')

        # The writer hears itself locally; the other view via storage
        self.assertEqual(got_a, [payload])
        self.assertEqual(got_b, [payload])

    def test_single_unsubscribe_detaches_both_channels(self):
        bus_a = ContentBus(local=InMemoryBroadcaster(), shared=self.view_a)
        bus_b = ContentBus(local=InMemoryBroadcaster(), shared=self.view_b)
        got = []
        unsubscribe = bus_a.on_content_changed('media', got.append)
        unsubscribe()
        bus_a.notify_content_changed('media')
        bus_b.notify_content_changed('media')
        self.assertEqual(got, [])


class TestDebouncer(unittest.TestCase):

    def test_drops_calls_within_interval(self):
        now = [10.0]
        got = []
        debounced = Debouncer(got.append, interval=1.0, clock=lambda: now[0])

        self.assertTrue(debounced({'n': 1}))
        now[0] = 10.5
        self.assertFalse(debounced({'n': 2}))
        now[0] = 11.2
        self.assertTrue(debounced({'n': 3}))
        self.assertEqual(got, [{'n': 1}, {'n': 3}])


if __name__ == '__main__':
    unittest.main()
