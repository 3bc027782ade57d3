import pytest

from navylib.scheduler import (
    SWITCH_TICK,
    Ipc,
    IpcType,
    Scheduler,
    Task,
    TaskState,
)


def make_scheduler(*names):
    scheduler = Scheduler()
    pids = [scheduler.push_task(Task(name)) for name in names]
    return scheduler, pids


def run_ticks(scheduler, count):
    return [scheduler.tick() for _ in range(count)]


def test_switch_takes_eight_ticks():
    scheduler, pids = make_scheduler("a")
    results = run_ticks(scheduler, 8)
    assert results == [False] * 7 + [True]
    assert scheduler.current_pid() == pids[0]


def test_boot_task_is_current():
    scheduler = Scheduler()
    assert scheduler.current_pid() == 0
    assert scheduler.current_task().name == "Boot"


def test_push_task_assigns_consecutive_pids():
    scheduler, pids = make_scheduler("a", "b")
    assert pids == [1, 2]
    assert scheduler.get_by_pid(pids[1]).name == "b"


def test_switch_happens_on_switch_tick():
    scheduler, _ = make_scheduler("a")
    results = run_ticks(scheduler, SWITCH_TICK)
    assert results == [False] * (SWITCH_TICK - 1) + [True]
    assert scheduler.current_task().name == "a"


def test_round_robin_wraps_to_boot():
    scheduler, pids = make_scheduler("a", "b")
    seen = []
    for _ in range(3):
        run_ticks(scheduler, SWITCH_TICK)
        seen.append(scheduler.current_pid())
    assert seen == pids + [0]


def test_force_yield_switches_on_next_tick():
    scheduler, pids = make_scheduler("a")
    scheduler.force_yield()
    assert scheduler.tick() is True
    assert scheduler.current_pid() == pids[0]


def test_dead_tasks_are_skipped():
    scheduler, pids = make_scheduler("a", "b")
    scheduler.get_by_pid(pids[0]).state = TaskState.DEAD
    run_ticks(scheduler, SWITCH_TICK)
    assert scheduler.current_pid() == pids[1]


def test_no_runnable_task_raises():
    scheduler = Scheduler()
    scheduler.exit_current(0)
    with pytest.raises(RuntimeError):
        scheduler.tick()


def test_exit_current_records_code_and_yields():
    scheduler, pids = make_scheduler("a")
    scheduler.exit_current(3)
    boot = scheduler.current_task()
    assert boot.state is TaskState.DEAD
    assert boot.return_value == 3
    assert scheduler.tick() is True
    assert scheduler.current_pid() == pids[0]


def test_get_by_pid_bounds_and_state():
    scheduler, pids = make_scheduler("a")
    assert scheduler.get_by_pid(len(pids) + 1) is None
    assert scheduler.get_by_pid(-1) is None
    scheduler.get_by_pid(pids[0]).state = TaskState.BLOCKED
    assert scheduler.get_by_pid(pids[0]) is None


def test_ipc_send_delivers_and_sets_sender():
    scheduler, pids = make_scheduler("a")
    msg = Ipc(receiver=pids[0], payload="hello", sender=42)
    scheduler.ipc_send(msg)
    target = scheduler.get_by_pid(pids[0])
    assert target.mailbox == [msg]
    assert msg.sender == scheduler.current_pid()


def test_ipc_send_to_missing_task():
    scheduler, pids = make_scheduler("a")
    with pytest.raises(ProcessLookupError):
        scheduler.ipc_send(Ipc(receiver=pids[0] + 5))
    scheduler.get_by_pid(pids[0]).state = TaskState.DEAD
    with pytest.raises(ProcessLookupError):
        scheduler.ipc_send(Ipc(receiver=pids[0]))


def test_ipc_receive_takes_latest_first():
    scheduler = Scheduler()
    first = Ipc(receiver=0, payload="first")
    second = Ipc(receiver=0, type=IpcType.SHARED_MEMORY, payload=0x1000)
    scheduler.ipc_send(first)
    scheduler.ipc_send(second)
    assert scheduler.ipc_receive() is second
    assert scheduler.ipc_receive() is first


def test_ipc_receive_empty_yields():
    scheduler, pids = make_scheduler("a")
    assert scheduler.ipc_receive() is None
    assert scheduler.tick() is True
    assert scheduler.current_pid() == pids[0]


def test_idle_reclaims_dead_tasks_once():
    scheduler, pids = make_scheduler("a", "b")
    dead = scheduler.get_by_pid(pids[0])
    scheduler.ipc_send(Ipc(receiver=pids[0], payload="late"))
    dead.state = TaskState.DEAD
    assert scheduler.idle() == 1
    assert dead.kernel_stack is None
    assert dead.mailbox == []
    assert scheduler.idle() == 0
    assert scheduler.get_by_pid(pids[1]).kernel_stack is not None