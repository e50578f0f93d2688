"""Command implementations shared by the test suite."""

from commandmanager.models.command import Command
from commandmanager.models.results import ExecutionOutcome

RECORD_KEY = "executed"


class RecordingCommand(Command):
    """Appends its class name to context[RECORD_KEY] and succeeds."""

    def execute(self, context):
        context.setdefault(RECORD_KEY, []).append(type(self).__name__)
        return ExecutionOutcome.success()


class Cmd1(RecordingCommand):
    pass


class Cmd2(RecordingCommand):
    def get_before_dependencies(self):
        return {"Cmd1"}


class Cmd3(RecordingCommand):
    def get_optional_before_dependencies(self):
        return {"Cmd1", "Cmd2"}


class Cmd4(RecordingCommand):
    def get_before_dependencies(self):
        return {"Cmd1"}

    def get_after_dependencies(self):
        return {"Cmd2"}

    def get_optional_after_dependencies(self):
        return {"Cmd3"}


class FailingCommand(Command):
    def execute(self, context):
        context.setdefault(RECORD_KEY, []).append(type(self).__name__)
        return ExecutionOutcome.failure("disk full", OSError("no space left"))


class WarningCommand(Command):
    def execute(self, context):
        context.setdefault(RECORD_KEY, []).append(type(self).__name__)
        return ExecutionOutcome.warning("partial input")


class SilentCommand(Command):
    """Returns None, which counts as success."""

    def execute(self, context):
        context.setdefault(RECORD_KEY, []).append(type(self).__name__)


class RaisingCommand(Command):
    def execute(self, context):
        context.setdefault(RECORD_KEY, []).append(type(self).__name__)
        raise RuntimeError("boom")


class NeedsArgumentsCommand(Command):
    def __init__(self, path):
        self.path = path

    def execute(self, context):
        return ExecutionOutcome.success()


class NoneDeclaringCommand(RecordingCommand):
    """Declares None instead of empty sets."""

    def get_before_dependencies(self):
        return None

    def get_after_dependencies(self):
        return None

    def get_optional_before_dependencies(self):
        return None

    def get_optional_after_dependencies(self):
        return None


class ContextProbeCommand(Command):
    """Stores the log context visible while it runs."""

    def execute(self, context):
        from commandmanager.observability.logger import get_context

        context["log_context"] = get_context()
        return ExecutionOutcome.success()
