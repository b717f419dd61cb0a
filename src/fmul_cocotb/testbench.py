import cocotb
from cocotb.clock import Clock
from cocotb.log import SimLog
from cocotb.triggers import RisingEdge, Timer


class Testbench:
    __test__ = False  # so pytest doesn't confuse this with a test

    def __init__(self, dut, clk=None, rst=None, step_ns=1) -> None:
        self.dut = dut
        self.clk = clk
        self.rst = rst
        self.step_ns = step_ns

        if not hasattr(self, "log"):
            self.log = SimLog("%s" % (type(self).__qualname__))

        if self.clk is not None:
            self.clock = Clock(self.clk, 20, units="ns")
            cocotb.start_soon(self.clock.start())

    async def step(self, n=1):
        """Advance n evaluation steps: clock edges if clocked, else delays."""
        for _ in range(n):
            if self.clk is not None:
                await RisingEdge(self.clk)
            else:
                await Timer(self.step_ns, units="ns")

    async def reset(self, active_high=True):
        if self.rst is None:
            raise Exception(
                "Cannot reset. Either a reset wire was not provided or "
                + "the module does not have a reset."
            )

        await RisingEdge(self.clk)
        self.rst.value = 1 if active_high else 0
        await RisingEdge(self.clk)
        self.rst.value = 0 if active_high else 1
        await RisingEdge(self.clk)
