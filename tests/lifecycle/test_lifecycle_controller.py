import tempfile
import textwrap
import unittest
from pathlib import Path

from hookrun.core.config import RuntimeConfig
from hookrun.core.errors import EngineConstructionError, LifecycleError, ScriptExecutionError
from hookrun.engine.engine import HookOutcome
from hookrun.lifecycle.controller import LifecycleController, LifecycleHandle
from hookrun.lifecycle.state import LifecycleState
from hookrun.options.applier import Action

FULL_DAEMON = """
events = []

def init(*args):
    events.append(("init", args))

def start():
    events.append(("start",))

def stop():
    events.append(("stop",))

def destroy():
    events.append(("destroy",))
"""


class TestLifecycleController(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self.settings = RuntimeConfig(home=str(self.root), module_path="")

    def tearDown(self) -> None:
        self._td.cleanup()

    def _script(self, name: str, source: str) -> str:
        path = self.root / name
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return str(path)

    def _controller(self, *argv: str) -> LifecycleController:
        controller = LifecycleController(self.settings)
        outcome = controller.configure(list(argv))
        self.assertIs(outcome.action, Action.CONTINUE)
        return controller

    def test_full_lifecycle(self) -> None:
        controller = self._controller(self._script("svc.py", FULL_DAEMON), "a", "b")
        self.assertIs(controller.state, LifecycleState.PARSED)

        self.assertIs(controller.init(), HookOutcome.INVOKED)
        self.assertIs(controller.state, LifecycleState.RUNNING)
        self.assertIsInstance(controller.handle, LifecycleHandle)
        module = controller.handle.module

        controller.start()
        controller.start()
        self.assertIs(controller.state, LifecycleState.RUNNING)
        controller.stop()
        self.assertIs(controller.state, LifecycleState.STOPPED)
        controller.destroy()
        self.assertIs(controller.state, LifecycleState.DESTROYED)
        self.assertFalse(controller.has_handle)

        self.assertEqual(
            module.events,
            [("init", ("a", "b")), ("start",), ("start",), ("stop",), ("destroy",)],
        )

    def test_missing_hooks_are_tolerated(self) -> None:
        controller = self._controller(self._script("empty.py", "x = 1\n"))
        self.assertIs(controller.init(), HookOutcome.MISSING)
        self.assertIs(controller.state, LifecycleState.RUNNING)
        self.assertIs(controller.start(), HookOutcome.MISSING)
        self.assertIs(controller.state, LifecycleState.RUNNING)
        self.assertIs(controller.stop(), HookOutcome.MISSING)
        self.assertIs(controller.destroy(), HookOutcome.MISSING)
        self.assertIs(controller.state, LifecycleState.DESTROYED)

    def test_hooks_are_noops_without_handle(self) -> None:
        controller = LifecycleController(self.settings)
        self.assertIsNone(controller.start())
        self.assertIsNone(controller.stop())
        self.assertIsNone(controller.destroy())
        self.assertIs(controller.state, LifecycleState.UNCONFIGURED)

    def test_calls_after_destroy_do_nothing(self) -> None:
        controller = self._controller(self._script("svc.py", FULL_DAEMON))
        controller.init()
        controller.destroy()
        self.assertIsNone(controller.start())
        self.assertIs(controller.state, LifecycleState.DESTROYED)

    def test_init_requires_script(self) -> None:
        controller = self._controller("-i")
        with self.assertRaises(LifecycleError) as ctx:
            controller.init()
        self.assertEqual(ctx.exception.code, "lifecycle.no_script")
        self.assertIn("daemon interface requires a script argument", str(ctx.exception))
        self.assertIs(controller.state, LifecycleState.ENGINE_READY)

    def test_init_before_configure_is_rejected(self) -> None:
        with self.assertRaises(LifecycleError):
            LifecycleController(self.settings).init()

    def test_engine_construction_failure(self) -> None:
        controller = self._controller(str(self.root / "absent.py"))
        with self.assertRaises(EngineConstructionError):
            controller.init()
        self.assertIs(controller.state, LifecycleState.PARSED)

    def test_failing_init_hook(self) -> None:
        script = self._script("bad.py", "def init(*args):\n    raise RuntimeError('no init')\n")
        controller = self._controller(script)
        with self.assertRaises(ScriptExecutionError) as ctx:
            controller.init()
        self.assertIn("RuntimeError: no init", ctx.exception.message)
        self.assertIs(controller.state, LifecycleState.MODULE_LOADED)

    def test_supervisor_restart_after_stop(self) -> None:
        controller = self._controller(self._script("svc.py", FULL_DAEMON))
        controller.init()
        module = controller.handle.module

        controller.stop()
        self.assertIs(controller.state, LifecycleState.STOPPED)
        self.assertIs(controller.start(), HookOutcome.INVOKED)
        self.assertIs(controller.state, LifecycleState.RUNNING)
        controller.stop()
        self.assertIs(controller.stop(), HookOutcome.INVOKED)
        self.assertIs(controller.state, LifecycleState.STOPPED)
        controller.destroy()

        self.assertEqual(
            module.events,
            [("init", ()), ("stop",), ("start",), ("stop",), ("stop",), ("destroy",)],
        )

    def test_configure_twice_is_rejected(self) -> None:
        controller = self._controller(self._script("svc.py", FULL_DAEMON))
        with self.assertRaises(LifecycleError) as ctx:
            controller.configure([])
        self.assertEqual(ctx.exception.code, "lifecycle.state")

    def test_init_twice_is_rejected(self) -> None:
        controller = self._controller(self._script("svc.py", FULL_DAEMON))
        controller.init()
        with self.assertRaises(LifecycleError):
            controller.init()
        self.assertIs(controller.state, LifecycleState.RUNNING)

    def test_help_leaves_controller_unconfigured(self) -> None:
        controller = LifecycleController(self.settings)
        self.assertIs(controller.configure(["-h"]).action, Action.HELP)
        self.assertIs(controller.state, LifecycleState.UNCONFIGURED)


if __name__ == "__main__":
    unittest.main()
