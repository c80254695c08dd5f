"""Task Manager - движок жизненного цикла задач.

Admission control, переходы статусов, retry policy и публикация событий.

Состояние движка (очередь pending и словарь running) мутируется только
его собственными методами внутри одного event loop. Слот конкурентности
резервируется синхронно в момент извлечения задачи из очереди, поэтому
пересекающиеся циклы admission не превышают потолок.

Example:
    >>> manager = TaskManager(project_service, history_service, event_bus)
    >>> task = await manager.create_task("proj-1", "Fix bug", max_budget=1.0)
    >>> await manager.cancel_task(task.id)

"""

import asyncio
import re
from collections import deque
from dataclasses import dataclass
from functools import partial
from typing import Protocol

from devdash.core.constants import (
    BUDGET_EXCEEDED_PATTERN,
    DEFAULT_BUDGET,
    MAX_CONCURRENT_TASKS,
    MAX_TASK_RETRIES,
    WORKER_SHUTDOWN_TIMEOUT,
)
from devdash.core.enums import TaskStatus
from devdash.models.events import (
    TaskCancelledEvent,
    TaskCompletedEvent,
    TaskCreatedEvent,
    TaskEvent,
    TaskFailedEvent,
    TaskOutputEvent,
    TaskRetryingEvent,
    TaskStartedEvent,
)
from devdash.models.project import Project
from devdash.models.task import Task, utc_now
from devdash.services.event_bus import EventBus
from devdash.services.process_supervisor import WorkerCallbacks, WorkerProcess, spawn_worker
from devdash.shared.errors import ProjectNotFoundError
from devdash.shared.logging import get_logger

logger = get_logger()


class ProjectLookup(Protocol):
    """Источник проектов (inventory)."""

    async def get_project_by_id(self, project_id: str) -> Project | None:
        """Найти проект по ID."""
        ...


class HistorySink(Protocol):
    """Хранилище терминальных задач."""

    async def add_task_to_history(self, task: Task) -> None:
        """Сохранить задачу (замена по ID)."""
        ...


class WorkerSpawner(Protocol):
    """Фабрика запущенных процессов воркера."""

    def __call__(
        self,
        cwd: str,
        prompt: str,
        max_budget: float | None = None,
        callbacks: WorkerCallbacks | None = None,
    ) -> WorkerProcess:
        """Создать и запустить воркер."""
        ...


@dataclass(slots=True)
class _RunningTask:
    """Задача, занимающая слот конкурентности."""

    task: Task
    cwd: str | None = None
    process: WorkerProcess | None = None
    attempt: int = 0


class TaskManager:
    """Планировщик задач с ограничением конкурентности и retry policy.

    Attributes:
        max_concurrent: Потолок одновременно запущенных воркеров
        max_retries: Максимум повторов при превышении бюджета
        default_budget: База для удвоения, если у задачи нет бюджета

    """

    def __init__(
        self,
        project_lookup: ProjectLookup,
        history: HistorySink,
        event_bus: EventBus,
        spawner: WorkerSpawner = spawn_worker,
        max_concurrent: int = MAX_CONCURRENT_TASKS,
        max_retries: int = MAX_TASK_RETRIES,
        default_budget: float = DEFAULT_BUDGET,
        budget_exceeded_pattern: str = BUDGET_EXCEEDED_PATTERN,
        shutdown_timeout: float = WORKER_SHUTDOWN_TIMEOUT,
    ) -> None:
        """Инициализировать TaskManager.

        Args:
            project_lookup: Поиск проектов по ID
            history: Хранилище истории задач
            event_bus: Шина событий для наблюдателей
            spawner: Фабрика процессов воркера
            max_concurrent: Потолок конкурентности
            max_retries: Максимум повторов
            default_budget: Бюджет по умолчанию для удвоения
            budget_exceeded_pattern: Регулярное выражение признака превышения бюджета
            shutdown_timeout: Ожидание воркеров при остановке (на SIGTERM и на SIGKILL)

        """
        self.project_lookup = project_lookup
        self.history = history
        self.event_bus = event_bus
        self.spawner = spawner
        self.max_concurrent = max_concurrent
        self.max_retries = max_retries
        self.default_budget = default_budget
        self.shutdown_timeout = shutdown_timeout
        self._budget_exceeded = re.compile(budget_exceeded_pattern, re.IGNORECASE)

        self._pending: deque[Task] = deque()
        self._running: dict[str, _RunningTask] = {}

        logger.info(
            "TaskManager инициализирован",
            max_concurrent=max_concurrent,
            max_retries=max_retries,
        )

    # =================================================================
    # Public API
    # =================================================================

    async def create_task(
        self,
        project_id: str,
        prompt: str,
        max_budget: float | None = None,
    ) -> Task:
        """Создать задачу и запустить цикл admission.

        Args:
            project_id: ID проекта
            prompt: Промпт для воркера
            max_budget: Бюджет шагов (опционально)

        Returns:
            Созданная задача (статус может быть уже running)

        Raises:
            ProjectNotFoundError: Если проект не найден (задача не создаётся)

        """
        project = await self.project_lookup.get_project_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        task = Task(project_id=project_id, prompt=prompt, max_budget=max_budget)
        self._pending.append(task)

        logger.info(
            "Задача создана",
            task_id=task.id,
            project_id=project_id,
            max_budget=max_budget,
            pending=len(self._pending),
        )
        self._publish(TaskCreatedEvent(task=task.model_copy()))

        await self._process_queue()
        return task

    def get_active_tasks(self) -> list[Task]:
        """Все активные задачи: сначала running, затем pending (FIFO)."""
        running = [entry.task for entry in self._running.values()]
        return [*running, *self._pending]

    def get_task(self, task_id: str) -> Task | None:
        """Найти активную задачу (терминальные - только в истории)."""
        for task in self._pending:
            if task.id == task_id:
                return task

        entry = self._running.get(task_id)
        return entry.task if entry else None

    async def cancel_task(self, task_id: str) -> bool:
        """Отменить задачу.

        Running задача помечается cancelled сразу, не дожидаясь
        завершения процесса; её слот освобождается немедленно.

        Args:
            task_id: ID задачи

        Returns:
            True если задача найдена и отменена

        """
        for task in self._pending:
            if task.id == task_id:
                self._pending.remove(task)
                task.mark_finished(TaskStatus.CANCELLED)

                logger.info("Pending задача отменена", task_id=task_id)
                self._publish(TaskCancelledEvent(task=task.model_copy()))
                await self._persist(task)
                return True

        entry = self._running.pop(task_id, None)
        if entry is None:
            return False

        # Процесс отвязан: его поздние события игнорируются
        if entry.process is not None:
            entry.process.kill()

        entry.task.mark_finished(TaskStatus.CANCELLED)

        logger.info("Running задача отменена", task_id=task_id, attempt=entry.attempt)
        self._publish(TaskCancelledEvent(task=entry.task.model_copy()))
        await self._persist(entry.task)

        await self._process_queue()
        return True

    def get_pending_count(self) -> int:
        """Количество задач в очереди."""
        return len(self._pending)

    def get_running_count(self) -> int:
        """Количество занятых слотов."""
        return len(self._running)

    async def shutdown(self) -> None:
        """Отменить все активные задачи и дождаться их воркеров.

        Pending отменяются первыми, поэтому освобождающиеся слоты
        ничего не запускают. Воркер, не завершившийся за
        shutdown_timeout после SIGTERM, получает SIGKILL.
        """
        processes = [entry.process for entry in self._running.values() if entry.process is not None]

        for task in reversed(self.get_active_tasks()):
            await self.cancel_task(task.id)

        if processes:
            await self._wait_for_workers(processes)

        logger.info("TaskManager остановлен")

    async def _wait_for_workers(self, processes: list[WorkerProcess]) -> None:
        alive = await self._wait_processes(processes)
        if not alive:
            return

        logger.warning("Воркеры не завершились после SIGTERM, отправляется SIGKILL", count=len(alive))
        for process in alive:
            process.kill(force=True)

        alive = await self._wait_processes(alive)
        if alive:
            logger.error("Воркеры не завершились после SIGKILL", count=len(alive))

    async def _wait_processes(self, processes: list[WorkerProcess]) -> list[WorkerProcess]:
        """Процессы, не завершившиеся за shutdown_timeout."""
        waiters = {asyncio.ensure_future(process.wait()): process for process in processes}
        _, pending = await asyncio.wait(waiters, timeout=self.shutdown_timeout)
        for waiter in pending:
            waiter.cancel()
        return [waiters[waiter] for waiter in pending]

    # =================================================================
    # Admission control
    # =================================================================

    async def _process_queue(self) -> None:
        """Цикл admission: запускать задачи из головы очереди, пока есть слоты."""
        while self._pending and len(self._running) < self.max_concurrent:
            task = self._pending.popleft()
            # Резерв слота до первой точки приостановки
            self._running[task.id] = _RunningTask(task=task)
            await self._start_task(task)

    async def _start_task(self, task: Task) -> None:
        """Запустить воркер для задачи с зарезервированным слотом."""
        lookup_error: str | None = None
        try:
            project = await self.project_lookup.get_project_by_id(task.project_id)
        except Exception as e:
            logger.exception("Ошибка поиска проекта при запуске", task_id=task.id, error=str(e))
            project = None
            lookup_error = str(e)

        entry = self._running.get(task.id)
        if entry is None or task.status is not TaskStatus.PENDING:
            # Отменена, пока проект резолвился
            return

        if project is None:
            del self._running[task.id]
            task.error = lookup_error or f"Project not found: {task.project_id}"
            task.mark_finished(TaskStatus.FAILED)

            logger.warning("Проект исчез до запуска задачи", task_id=task.id, project_id=task.project_id)
            self._publish(TaskFailedEvent(task=task.model_copy()))
            await self._persist(task)
            return

        task.status = TaskStatus.RUNNING
        task.started_at = utc_now()
        entry.cwd = project.path
        self._launch(entry)

        logger.info("Задача запущена", task_id=task.id, cwd=project.path, running=len(self._running))
        self._publish(TaskStartedEvent(task=task.model_copy()))

    def _launch(self, entry: _RunningTask) -> None:
        task = entry.task
        entry.attempt = task.retry_count
        callbacks = WorkerCallbacks(
            on_output=partial(self._handle_output, task.id, entry.attempt),
            on_error=partial(self._handle_error, task.id, entry.attempt),
            on_exit=partial(self._handle_exit, task.id, entry.attempt),
        )
        entry.process = self.spawner(
            cwd=entry.cwd or ".",
            prompt=task.prompt,
            max_budget=task.max_budget,
            callbacks=callbacks,
        )

    # =================================================================
    # Worker events
    # =================================================================

    def _current(self, task_id: str, attempt: int) -> _RunningTask | None:
        """Запись running задачи, если событие от её текущего процесса."""
        entry = self._running.get(task_id)
        if entry is None or entry.attempt != attempt:
            return None
        return entry

    async def _handle_output(self, task_id: str, attempt: int, chunk: str) -> None:
        entry = self._current(task_id, attempt)
        if entry is None:
            return

        entry.task.output += chunk
        self._publish(TaskOutputEvent(task_id=task_id, output=chunk))

    async def _handle_error(self, task_id: str, attempt: int, chunk: str) -> None:
        entry = self._current(task_id, attempt)
        if entry is None:
            return

        entry.task.error = (entry.task.error or "") + chunk

    async def _handle_exit(
        self,
        task_id: str,
        attempt: int,
        code: int | None,
        signal_name: str | None,
    ) -> None:
        entry = self._current(task_id, attempt)
        if entry is None:
            logger.debug("Событие exit отвязанного процесса проигнорировано", task_id=task_id)
            return

        task = entry.task

        if code != 0 and self._should_retry(task):
            self._retry(entry)
            return

        del self._running[task_id]

        if code == 0:
            task.mark_finished(TaskStatus.COMPLETED)
            logger.info("Задача выполнена", task_id=task_id, duration_ms=task.duration_ms)
            self._publish(TaskCompletedEvent(task=task.model_copy()))
        else:
            if not task.error:
                task.error = self._describe_exit(code, signal_name)
            task.mark_finished(TaskStatus.FAILED)
            logger.warning(
                "Задача завершилась ошибкой",
                task_id=task_id,
                code=code,
                signal=signal_name,
                retry_count=task.retry_count,
            )
            self._publish(TaskFailedEvent(task=task.model_copy()))

        await self._persist(task)
        await self._process_queue()

    # =================================================================
    # Retry policy
    # =================================================================

    def _should_retry(self, task: Task) -> bool:
        """Воркер упёрся в лимит шагов и повторы ещё остались."""
        if task.retry_count >= self.max_retries:
            return False
        return bool(self._budget_exceeded.search(f"{task.output}\n{task.error or ''}"))

    def _retry(self, entry: _RunningTask) -> None:
        """Перезапуск в том же слоте с удвоенным бюджетом."""
        task = entry.task
        task.retry_count += 1
        task.max_budget = (task.max_budget or self.default_budget) * 2
        task.error = None

        logger.info(
            "Превышен бюджет, повтор задачи",
            task_id=task.id,
            retry_count=task.retry_count,
            max_budget=task.max_budget,
        )
        self._publish(TaskRetryingEvent(task=task.model_copy()))

        self._launch(entry)
        self._publish(TaskStartedEvent(task=task.model_copy()))

    @staticmethod
    def _describe_exit(code: int | None, signal_name: str | None) -> str:
        if code is None and signal_name:
            return f"Process terminated by signal {signal_name}"
        return f"Process exited with code {code}"

    # =================================================================
    # Side effects
    # =================================================================

    def _publish(self, event: TaskEvent) -> None:
        self.event_bus.publish(event)

    async def _persist(self, task: Task) -> None:
        """Сохранить терминальную задачу в историю (best-effort)."""
        try:
            await self.history.add_task_to_history(task)
        except Exception as e:
            logger.exception("Не удалось сохранить задачу в историю", task_id=task.id, error=str(e))
