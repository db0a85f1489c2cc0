"""Output handler implementations: console, null, buffered, plus git progress bars."""

from __future__ import annotations

from colorama import Fore, Style
from git import RemoteProgress
from tqdm import tqdm

SECTION_WIDTH = 50


class ConsoleOutputHandler:
    """Console output with colors."""

    def __init__(self, verbose: bool = False):
        """Create a console handler. Set verbose=True to enable debug output."""
        self.verbose = verbose

    def info(self, message: str, indent: int = 0) -> None:
        """Print an informational message."""
        tqdm.write("  " * indent + message)

    def success(self, message: str, indent: int = 0) -> None:
        """Print a green success message."""
        tqdm.write("  " * indent + f"{Fore.GREEN}{message}{Style.RESET_ALL}")

    def warning(self, message: str, indent: int = 0) -> None:
        """Print a yellow warning message."""
        tqdm.write("  " * indent + f"{Fore.YELLOW}{message}{Style.RESET_ALL}")

    def error(self, message: str, indent: int = 0) -> None:
        """Print a red error message."""
        tqdm.write("  " * indent + f"{Fore.RED}{message}{Style.RESET_ALL}")

    def section(self, title: str) -> None:
        """Print a section header with a divider line."""
        tqdm.write("")
        tqdm.write(title)
        tqdm.write("-" * SECTION_WIDTH)

    def debug(self, message: str) -> None:
        """Print a cyan debug message (only when verbose is enabled)."""
        if self.verbose:
            tqdm.write(f"{Fore.CYAN}[DEBUG] {message}{Style.RESET_ALL}")


class NullOutputHandler:
    """Silent output handler."""

    def info(self, message: str, indent: int = 0) -> None:
        pass

    def success(self, message: str, indent: int = 0) -> None:
        pass

    def warning(self, message: str, indent: int = 0) -> None:
        pass

    def error(self, message: str, indent: int = 0) -> None:
        pass

    def section(self, title: str) -> None:
        pass

    def debug(self, message: str) -> None:
        pass


class BufferedOutputHandler:
    """Collects (level, message) pairs instead of printing them."""

    def __init__(self):
        self.records: list[tuple[str, str]] = []

    def info(self, message: str, indent: int = 0) -> None:
        self.records.append(('info', "  " * indent + message))

    def success(self, message: str, indent: int = 0) -> None:
        self.records.append(('success', "  " * indent + message))

    def warning(self, message: str, indent: int = 0) -> None:
        self.records.append(('warning', "  " * indent + message))

    def error(self, message: str, indent: int = 0) -> None:
        self.records.append(('error', "  " * indent + message))

    def section(self, title: str) -> None:
        self.records.append(('section', title))

    def debug(self, message: str) -> None:
        """No-op (debug output is never buffered)."""
        pass

    @property
    def messages(self) -> list[str]:
        return [message for _level, message in self.records]

    def messages_at(self, level: str) -> list[str]:
        """Return the buffered messages of one level ('info', 'warning', ...)."""
        return [message for lvl, message in self.records if lvl == level]

    def text(self) -> str:
        """Return all buffered messages joined by newlines."""
        return "\n".join(self.messages)

    def flush_to(self, target) -> None:
        """Replay all buffered messages on a target handler and clear the buffer."""
        for level, message in self.records:
            getattr(target, level)(message)
        self.records.clear()


class GitProgressBar(RemoteProgress):
    """tqdm bar fed by GitPython's transfer progress callbacks (fetch, clone)."""

    def __init__(self, description: str):
        super().__init__()
        self._description = description
        self._bar: tqdm | None = None

    def update(self, op_code, cur_count, max_count=None, message=''):
        if self._bar is None:
            self._bar = tqdm(desc=self._description, unit='obj', leave=False)
        if max_count:
            self._bar.total = int(max_count)
        self._bar.n = int(cur_count)
        if message:
            self._bar.set_postfix_str(message, refresh=False)
        self._bar.refresh()

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
