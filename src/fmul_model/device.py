"""
In-process multiplier devices.

A device is driven through a strict drive -> evaluate -> read protocol: the
operands are written, the device is stepped a fixed number of times and only
then is the output sampled. The HDL multiplier simulated through cocotb
follows the same contract, see fmul_cocotb.fmul_tb.
"""

import numpy as np

from .bitfield import WORD_MASK, is_nan, is_subnormal, sign_bit
from .reference import QNAN, MulResult, reference_mul, signed_zero


class Device:
    """
    Base multiplier device.

    Subclasses implement _compute(a, b) returning a MulResult. The base class
    owns the input ports, the output register and the step counter.
    """

    def __init__(self, latency=1, trace_hook=None) -> None:
        assert latency >= 1, f"Invalid latency: {latency}"
        self.latency = latency
        self.trace_hook = trace_hook

        self.a = 0
        self.b = 0
        self.step = 0

        self._pending = []
        self._output = MulResult(0)

    def drive(self, a: int, b: int) -> None:
        self.a = a & WORD_MASK
        self.b = b & WORD_MASK

    def evaluate(self) -> int:
        # The output register lags the inputs by `latency` steps
        self._pending.append(self._compute(self.a, self.b))
        if len(self._pending) >= self.latency:
            self._output = self._pending.pop(0)
        self.step += 1
        if self.trace_hook is not None:
            self.trace_hook(self.step, self.a, self.b, self._output)
        return self.step

    def read(self) -> MulResult:
        return self._output

    def _compute(self, a: int, b: int) -> MulResult:
        raise NotImplementedError


class ReferenceDevice(Device):
    """Device whose datapath is the bit-exact reference itself."""

    def _compute(self, a, b):
        return reference_mul(a, b)


class NativeFloatDevice(Device):
    """
    Host floating point multiply with DAZ/FTZ wrapped around it.

    This is the float based alternative to the reference. The float32
    multiply rounds at subnormal precision before the flush, so results
    right at the underflow boundary can disagree with the integer model.
    Only use it as a device under test.
    """

    def _compute(self, a, b):
        if is_nan(a) or is_nan(b):
            return MulResult(QNAN)

        # Denormals are zero
        if is_subnormal(a):
            a = signed_zero(sign_bit(a))
        if is_subnormal(b):
            b = signed_zero(sign_bit(b))

        fa, fb = np.array([a, b], dtype=np.uint32).view(np.float32)
        with np.errstate(all="ignore"):
            p = np.float32(fa * fb)
        exact = np.float64(fa) * np.float64(fb)

        if np.isnan(p):
            return MulResult(QNAN, invalid=True)

        bits = int(np.array([p], dtype=np.float32).view(np.uint32)[0])
        if np.isinf(p):
            overflow = not (np.isinf(fa) or np.isinf(fb))
            return MulResult(bits, overflow=overflow, inexact=overflow)

        if exact != 0 and (p == 0 or is_subnormal(bits)):
            return MulResult(signed_zero(sign_bit(bits)), underflow=True, inexact=True)

        return MulResult(bits, inexact=bool(np.float64(p) != exact))


class FaultyDevice(Device):
    """
    Wraps another device and corrupts its output.

    Args:
        inner: device providing the fault-free datapath
        when: predicate (a, b) -> bool selecting the operands to corrupt
        result_mask: XOR mask applied to the output word
        flag_mask: XOR mask applied to the (invalid, overflow, underflow,
            inexact) flags
    """

    def __init__(
        self, inner, when=None, result_mask=0, flag_mask=(0, 0, 0, 0), **kwargs
    ) -> None:
        super().__init__(**kwargs)
        self.inner = inner
        self.when = when if when is not None else (lambda a, b: True)
        self.result_mask = result_mask
        self.flag_mask = tuple(bool(m) for m in flag_mask)

    def _compute(self, a, b):
        r = self.inner._compute(a, b)
        if not self.when(a, b):
            return r
        flags = [f ^ m for f, m in zip(r.flags(), self.flag_mask)]
        return MulResult((r.result ^ self.result_mask) & WORD_MASK, *flags)
