import asyncio

from reaper import IdleRoomReaper


def test_sweep_deletes_only_empty_rooms_past_grace(registry, membership, clock):
    reaper = IdleRoomReaper(registry, interval_seconds=300, grace_seconds=3600)
    old_empty = membership.create_room()
    old_busy = membership.create_room()
    membership.join("A", old_busy, "Ann")
    clock.advance(3601)
    young_empty = membership.create_room()

    assert reaper.sweep() == [old_empty]

    assert registry.rooms.get_room(old_empty) is None
    assert registry.rooms.get_room(old_busy) is not None
    assert registry.rooms.get_room(young_empty) is not None


def test_sweep_keeps_room_exactly_at_grace_boundary(registry, membership, clock):
    reaper = IdleRoomReaper(registry, grace_seconds=3600)
    room_id = membership.create_room()
    clock.advance(3600)

    assert reaper.sweep() == []
    assert room_id in registry.rooms


def test_sweep_with_explicit_time(registry, membership, clock):
    reaper = IdleRoomReaper(registry, grace_seconds=60)
    room_id = membership.create_room()
    clock.advance(120)

    assert reaper.sweep(now=clock.now) == [room_id]
    assert reaper.sweep(now=clock.now) == []


def test_reaper_task_sweeps_periodically_and_stops(registry, membership, clock):
    reaper = IdleRoomReaper(registry, interval_seconds=0.01, grace_seconds=10)
    room_id = membership.create_room()
    clock.advance(11)

    async def scenario():
        reaper.start()
        assert reaper.running
        reaper.start()  # second start is a no-op
        for _ in range(100):
            if room_id not in registry.rooms:
                break
            await asyncio.sleep(0.01)
        await reaper.stop()

    asyncio.run(scenario())

    assert room_id not in registry.rooms
    assert not reaper.running


def test_reaper_loop_survives_sweep_errors(registry):
    reaper = IdleRoomReaper(registry, interval_seconds=0.01)
    calls = []

    def broken_sweep(now=None):
        calls.append(now)
        raise RuntimeError("boom")

    reaper.sweep = broken_sweep

    async def scenario():
        reaper.start()
        for _ in range(100):
            if len(calls) >= 3:
                break
            await asyncio.sleep(0.01)
        assert reaper.running
        await reaper.stop()

    asyncio.run(scenario())
    assert len(calls) >= 3


def test_stop_without_start_is_harmless(registry):
    asyncio.run(IdleRoomReaper(registry).stop())
