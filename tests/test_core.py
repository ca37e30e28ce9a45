"""SensorInbox slots and RobotCore draining."""

from __future__ import annotations

import threading

import numpy as np

from targetseek.io.scripted_feed import depth_cloud, target_blobs
from targetseek.perception.inbox import SensorInbox, SensorKind


class TestSensorInbox:
    def test_new_event_overwrites_pending_of_same_kind(self):
        inbox = SensorInbox()
        inbox.post_depth(np.zeros((1, 3)))
        latest = np.ones((2, 3))
        inbox.post_depth(latest)
        events = inbox.drain()
        assert len(events) == 1
        assert events[0].payload is latest
        assert inbox.posted_counts()["depth"] == 2

    def test_contact_edges_are_queued(self):
        inbox = SensorInbox()
        inbox.post_contact(True)
        inbox.post_depth(np.zeros((1, 3)))
        inbox.post_contact(False)
        assert inbox.pending() == 3
        events = inbox.drain()
        assert [(e.kind, e.payload) for e in events if e.kind is SensorKind.CONTACT] == [
            (SensorKind.CONTACT, True),
            (SensorKind.CONTACT, False),
        ]
        assert [e.kind for e in events] == [SensorKind.CONTACT, SensorKind.DEPTH, SensorKind.CONTACT]

    def test_drain_returns_arrival_order_and_empties(self):
        inbox = SensorInbox()
        inbox.post_depth(np.zeros((1, 3)))
        inbox.post_contact(True)
        inbox.post_blobs([])
        inbox.post_depth(np.zeros((1, 3)))  # re-arrival moves depth to the back
        assert [e.kind for e in inbox.drain()] == [SensorKind.CONTACT, SensorKind.BLOBS, SensorKind.DEPTH]
        assert inbox.pending() == 0
        assert inbox.drain() == []

    def test_received_at_uses_clock(self, clock):
        inbox = SensorInbox(clock=clock)
        clock.t = 4.5
        inbox.post_contact(1)
        (event,) = inbox.drain()
        assert event.received_at == 4.5
        assert event.payload is True

    def test_concurrent_posts(self):
        inbox = SensorInbox()
        n = 500

        def producer(kind):
            for i in range(n):
                if kind == "blobs":
                    inbox.post_blobs([])
                elif kind == "depth":
                    inbox.post_depth(np.zeros((1, 3)))
                else:
                    inbox.post_contact(i % 2 == 0)

        threads = [threading.Thread(target=producer, args=(k,)) for k in ("blobs", "depth", "contact")]
        drained = 0
        for t in threads:
            t.start()
        while any(t.is_alive() for t in threads):
            drained += len(inbox.drain())
        for t in threads:
            t.join()
        drained += len(inbox.drain())
        assert inbox.posted_counts() == {"blobs": n, "depth": n, "contact": n}
        # contact edges are never dropped; blobs and depth may collapse
        assert n + 2 <= drained <= 3 * n


class TestRobotCore:
    def test_initial_state_is_neutral(self, core):
        assert core.goal.goal_found is False
        assert core.goal.goal_blob_area == 0
        assert core.obstacle.obstacle_found is False
        assert core.obstacle.bumper_latched is False

    def test_drain_applies_all_kinds(self, core, cfg):
        core.inbox.post_blobs(target_blobs(cfg, area=5000))
        core.inbox.post_depth(depth_cloud(cfg, near_points=12))
        assert core.drain() == 2
        assert core.goal.goal_found is True
        assert core.obstacle.obstacle_found is True
        assert core.last_depth_hits == 12

    def test_press_then_clear_depth_stays_blocked(self, core, cfg):
        core.inbox.post_contact(True)
        core.inbox.post_depth(depth_cloud(cfg))
        core.drain()
        assert core.obstacle.obstacle_found is True

    def test_release_then_clear_depth_unblocks(self, core, cfg):
        core.inbox.post_contact(True)
        core.drain()
        core.inbox.post_contact(False)
        core.inbox.post_depth(depth_cloud(cfg))
        core.drain()
        assert core.obstacle.obstacle_found is False

    def test_clear_depth_then_release_stays_blocked(self, core, cfg):
        core.inbox.post_contact(True)
        core.drain()
        core.inbox.post_depth(depth_cloud(cfg))
        core.inbox.post_contact(False)
        core.drain()
        assert core.obstacle.bumper_latched is False
        assert core.obstacle.obstacle_found is True

    def test_press_and_release_within_one_drain_blocks(self, core, cfg):
        core.inbox.post_depth(depth_cloud(cfg))
        core.drain()
        core.inbox.post_contact(True)
        core.inbox.post_contact(False)
        assert core.drain() == 2
        assert core.obstacle.obstacle_found is True
        assert core.obstacle.bumper_latched is False

    def test_snapshot_reports_sensor_ages(self, core, cfg, clock):
        assert core.snapshot()["sensor_age_s"] == {"blobs": None, "depth": None, "contact": None}
        clock.t = 1.0
        core.inbox.post_depth(depth_cloud(cfg))
        core.drain()
        clock.t = 3.5
        snap = core.snapshot()
        assert snap["sensor_age_s"]["depth"] == 2.5
        assert snap["sensor_age_s"]["blobs"] is None
        assert snap["obstacle_found"] is False
        assert snap["depth_hits"] == 0

    def test_arrival_reached(self, core, cfg):
        core.goal.goal_blob_area = int(cfg.arrival_area)
        assert not core.arrival_reached
        core.goal.goal_blob_area += 1
        assert core.arrival_reached
