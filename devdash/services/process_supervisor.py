"""Process Supervisor для DevDash.

Управляет одним запуском внешнего coding-assistant CLI:
spawn, стриминг stdout/stderr, обнаружение завершения, kill.

Ничего не знает о задачах - наружу отдаёт только три события:
- on_output(chunk) - фрагмент stdout
- on_error(chunk) - фрагмент stderr (или сообщение об ошибке spawn)
- on_exit(code, signal) - ровно один раз, после всех фрагментов

Example:
    >>> process = spawn_worker(cwd="/src/app", prompt="Fix bug", max_budget=1.0,
    ...                        callbacks=WorkerCallbacks(on_exit=handle_exit))
    >>> process.kill()

"""

import asyncio
import codecs
import math
import signal
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from devdash.core.constants import (
    DEFAULT_WORKER_EXECUTABLE,
    MIN_MAX_TURNS,
    TURNS_PER_BUDGET_UNIT,
)
from devdash.shared.logging import get_logger

logger = get_logger()

READ_CHUNK_SIZE = 4096
EXIT_POLL_INTERVAL = 0.05
PIPE_DRAIN_TIMEOUT = 1.0

ChunkHandler = Callable[[str], Awaitable[None]]
ExitHandler = Callable[[int | None, str | None], Awaitable[None]]


async def _ignore_chunk(chunk: str) -> None:
    return None


async def _ignore_exit(code: int | None, signal_name: str | None) -> None:
    return None


@dataclass(slots=True)
class WorkerCallbacks:
    """Обработчики событий процесса воркера."""

    on_output: ChunkHandler = field(default=_ignore_chunk)
    on_error: ChunkHandler = field(default=_ignore_chunk)
    on_exit: ExitHandler = field(default=_ignore_exit)


def signal_name(signum: int) -> str:
    """Имя сигнала; для номеров вне signal.Signals (real-time) - SIG<N>."""
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"SIG{signum}"


def budget_to_max_turns(budget: float) -> int:
    """Перевести бюджет в лимит шагов воркера.

    Args:
        budget: Бюджет задачи (> 0)

    Returns:
        max(25, ceil(budget * 10))

    """
    return max(MIN_MAX_TURNS, math.ceil(budget * TURNS_PER_BUDGET_UNIT))


def build_worker_args(prompt: str, max_budget: float | None = None) -> list[str]:
    """Собрать аргументы командной строки воркера (без исполняемого файла).

    Args:
        prompt: Промпт задачи
        max_budget: Бюджет (опционально)

    Returns:
        Список аргументов

    """
    # Воркер не должен блокироваться на интерактивном подтверждении
    args = ["-p", prompt, "--dangerously-skip-permissions"]

    if max_budget:
        args.extend(["--max-turns", str(budget_to_max_turns(max_budget))])

    args.append("--verbose")
    return args


class WorkerProcess:
    """Обёртка над одним процессом внешнего воркера.

    Все сбои (в том числе ошибка spawn) приходят как события,
    start() и kill() не бросают исключений.
    """

    def __init__(
        self,
        cwd: str,
        prompt: str,
        max_budget: float | None = None,
        callbacks: WorkerCallbacks | None = None,
        executable: str = DEFAULT_WORKER_EXECUTABLE,
    ) -> None:
        """Инициализировать процесс (без запуска).

        Args:
            cwd: Рабочая директория (путь проекта)
            prompt: Промпт для воркера
            max_budget: Бюджет шагов (опционально)
            callbacks: Обработчики событий
            executable: Исполняемый файл CLI

        """
        self.cwd = cwd
        self.prompt = prompt
        self.max_budget = max_budget
        self.callbacks = callbacks or WorkerCallbacks()
        self.executable = executable

        self._process: asyncio.subprocess.Process | None = None
        self._runner: asyncio.Task[None] | None = None
        self._output = ""
        self._error_output = ""
        self._running = False
        self._exited = False
        self._kill_requested = False

    @property
    def args(self) -> list[str]:
        """Полная командная строка воркера."""
        return [self.executable, *build_worker_args(self.prompt, self.max_budget)]

    @property
    def pid(self) -> int | None:
        """PID процесса (None до spawn)."""
        return self._process.pid if self._process else None

    def start(self) -> None:
        """Запустить воркер в фоне.

        Должен вызываться из работающего event loop. Ошибка spawn
        приходит асинхронно через on_error + on_exit(1, None).
        """
        if self._runner is not None:
            logger.warning("WorkerProcess уже запущен", cwd=self.cwd, pid=self.pid)
            return

        self._running = True
        self._runner = asyncio.get_running_loop().create_task(self._run())

    def kill(self, force: bool = False) -> None:
        """Отправить SIGTERM (или SIGKILL при force) процессу.

        No-op если процесс не запускался или уже завершился.
        Событие on_exit придёт после подтверждения от ОС.
        """
        if not self._running:
            return

        if self._process is None:
            # spawn ещё не произошёл - убить сразу после него
            self._kill_requested = True
            return

        if self._process.returncode is None:
            try:
                if force:
                    self._process.kill()
                else:
                    self._process.terminate()
            except ProcessLookupError:
                return
            logger.debug("Сигнал отправлен воркеру", pid=self._process.pid, force=force)

    def is_running(self) -> bool:
        """True между start() и терминальным on_exit."""
        return self._running

    def get_output(self) -> str:
        """Накопленный stdout."""
        return self._output

    def get_error_output(self) -> str:
        """Накопленный stderr."""
        return self._error_output

    async def wait(self) -> None:
        """Дождаться завершения (включая доставку on_exit)."""
        if self._runner is not None:
            await asyncio.shield(self._runner)

    async def _run(self) -> None:
        try:
            try:
                self._process = await asyncio.create_subprocess_exec(
                    *self.args,
                    cwd=self.cwd,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as e:
                logger.warning(
                    "Не удалось запустить воркер",
                    executable=self.executable,
                    cwd=self.cwd,
                    error=str(e),
                )
                await self._dispatch(self.callbacks.on_error, str(e))
                await self._finish(1, None)
                return

            logger.info("Воркер запущен", pid=self._process.pid, cwd=self.cwd)

            if self._kill_requested:
                self.kill()

            pumps = [
                asyncio.create_task(self._pump(self._process.stdout, is_stderr=False)),
                asyncio.create_task(self._pump(self._process.stderr, is_stderr=True)),
            ]
            try:
                returncode = await self._wait_exit()
                await self._drain(pumps)
            finally:
                for pump in pumps:
                    pump.cancel()

            if returncode < 0:
                await self._finish(None, signal_name(-returncode))
            else:
                await self._finish(returncode, None)

        except Exception as e:
            logger.exception("Ошибка супервизора воркера", cwd=self.cwd, error=str(e))
            if not self._exited:
                await self._dispatch(self.callbacks.on_error, str(e))
                await self._finish(1, None)

    async def _wait_exit(self) -> int:
        """Код возврата сразу после завершения самого процесса.

        Process.wait() дожидается ещё и закрытия pipe, а их может держать
        фоновый потомок воркера, поэтому returncode опрашивается напрямую.
        """
        assert self._process is not None
        while self._process.returncode is None:
            await asyncio.sleep(EXIT_POLL_INTERVAL)
        return self._process.returncode

    async def _drain(self, pumps: list[asyncio.Task[None]]) -> None:
        """Дочитать то, что процесс успел записать; не дольше PIPE_DRAIN_TIMEOUT."""
        done, pending = await asyncio.wait(pumps, timeout=PIPE_DRAIN_TIMEOUT)
        if pending:
            logger.debug("Pipe воркера остаётся открытым после выхода", pid=self.pid, pending=len(pending))
        for pump in done:
            pump.result()

    async def _pump(self, stream: asyncio.StreamReader | None, *, is_stderr: bool) -> None:
        if stream is None:
            return

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        handler = self.callbacks.on_error if is_stderr else self.callbacks.on_output

        while True:
            data = await stream.read(READ_CHUNK_SIZE)
            chunk = decoder.decode(data, final=not data)
            if chunk:
                if is_stderr:
                    self._error_output += chunk
                else:
                    self._output += chunk
                await self._dispatch(handler, chunk)
            if not data:
                break

    async def _finish(self, code: int | None, signal_name: str | None) -> None:
        if self._exited:
            return
        self._exited = True
        self._running = False

        logger.info("Воркер завершился", pid=self.pid, code=code, signal=signal_name)
        await self._dispatch(self.callbacks.on_exit, code, signal_name)

    async def _dispatch(self, handler: Callable[..., Awaitable[None]], *args: object) -> None:
        # Ошибка обработчика не должна ломать стриминг
        try:
            await handler(*args)
        except Exception as e:
            logger.exception("Ошибка обработчика события воркера", error=str(e))


def spawn_worker(
    cwd: str,
    prompt: str,
    max_budget: float | None = None,
    callbacks: WorkerCallbacks | None = None,
    executable: str = DEFAULT_WORKER_EXECUTABLE,
) -> WorkerProcess:
    """Создать и запустить воркер.

    Args:
        cwd: Рабочая директория
        prompt: Промпт
        max_budget: Бюджет (опционально)
        callbacks: Обработчики событий
        executable: Исполняемый файл CLI

    Returns:
        Запущенный WorkerProcess

    """
    process = WorkerProcess(
        cwd=cwd,
        prompt=prompt,
        max_budget=max_budget,
        callbacks=callbacks,
        executable=executable,
    )
    process.start()
    return process
