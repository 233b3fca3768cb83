r"""@package chebsolve.chebop.display

Observers notified of the progress of the Newton iteration.

The solver calls the hooks synchronously. Return values are ignored.
"""

import numbers
import time


__all__ = [
    "NewtonDisplay",
    "PrintDisplay",
    "CallbackDisplay",
    "make_display",
]


class NewtonDisplay(object):
    r"""Base observer doing nothing.

    Subclasses override any of the hooks. The `pause` attribute is the number
    of seconds to wait after each iteration (from `BVPPrefs.plotting`).
    """

    def __init__(self):
        ## Seconds to pause after each iteration.
        self.pause = 0.0

    def start(self, u, info):
        r"""Called once before the first iteration with the initial guess."""
        pass

    def iteration_start(self, it, u, info):
        pass

    def iteration_end(self, it, u, delta, info):
        r"""Called after the iterate `u` was updated by `delta`."""
        pass

    def finish(self, u, info):
        pass

    def _wait(self):
        if self.pause > 0:
            time.sleep(self.pause)


class PrintDisplay(NewtonDisplay):
    r"""Print a line per Newton step."""

    def start(self, u, info):
        print("Newton iteration using %s discretization"
              % info.discretization)

    def iteration_end(self, it, u, delta, info):
        print("%02d: |delta| = %.3e, error estimate = %.3e, lambda = %g, "
              "length = %d" % (it+1, info.norm_delta[-1], info.err_est[-1],
                               info.lambdas[-1], max(len(f) for f in u)))
        self._wait()

    def finish(self, u, info):
        if info.converged:
            print("Newton iteration converged (%s)." % info.reason)
        else:
            print("Newton iteration stopped: %s" % info.reason)


class CallbackDisplay(NewtonDisplay):
    r"""Call a function `func(it, u, info)` after each iteration."""

    def __init__(self, func):
        super(CallbackDisplay, self).__init__()
        self.func = func

    def iteration_end(self, it, u, delta, info):
        self.func(it, u, info)
        self._wait()


def make_display(display, prefs):
    r"""Observer for the `display` argument of solvebvp().

    `None` gives a PrintDisplay if `prefs.verbose` is set and a silent
    NewtonDisplay otherwise. Plain callables are wrapped in a
    CallbackDisplay.
    """
    if display is None:
        display = PrintDisplay() if prefs.verbose else NewtonDisplay()
    elif not isinstance(display, NewtonDisplay):
        if not callable(display):
            raise TypeError("Invalid display observer: %r" % (display,))
        display = CallbackDisplay(display)
    if isinstance(prefs.plotting, numbers.Number):
        display.pause = float(prefs.plotting)
    return display
