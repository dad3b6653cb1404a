import pytest

from iblessing.thread_state import DEFAULT_SP_UPPER_BOUND, ThreadState, main_thread_state


def test_register_counts():
    state = ThreadState(0x1000)
    assert len(state.x) == 31
    assert len(state.d) == 32
    assert [r.num for r in state.x] == list(range(31))


def test_sp_initial_value():
    state = ThreadState(0x1000)
    assert state.sp.value == 0x1000
    assert state.register("sp") is state.sp


@pytest.mark.parametrize("index", [0, 5, 28, 29, 30])
def test_x_names_select_64_bit_view(index):
    state = ThreadState()
    reg = state.register(f"x{index}")
    assert reg is state.x[index]
    assert reg.size == 8


def test_w_name_shares_register_with_x():
    state = ThreadState()
    x3 = state.register("x3")
    x3.set_value(0x1122334455667788)
    w3 = state.register("w3")
    assert w3 is x3
    assert w3.size == 4
    assert w3.value == 0x55667788


def test_x_after_w_restores_width():
    state = ThreadState()
    state.register("w7")
    assert state.register("x7").size == 8


def test_aliases():
    state = ThreadState()
    assert state.register("fp") is state.x[29]
    assert state.register("lr") is state.x[30]


def test_d_registers():
    state = ThreadState()
    assert state.register("d0") is state.d[0]
    assert state.register("d31") is state.d[31]


@pytest.mark.parametrize("name", ["xzr", "wzr", "w31", "x31", "d32", "q0", ""])
def test_unknown_names_give_none(name):
    assert ThreadState().register(name) is None


def test_main_thread_state_is_shared():
    first = main_thread_state()
    assert main_thread_state() is first
    assert first.sp.value == DEFAULT_SP_UPPER_BOUND