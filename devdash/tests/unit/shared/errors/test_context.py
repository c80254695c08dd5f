"""Тесты для trace context."""

from devdash.shared.errors.context import get_trace_id, new_trace_id, trace_context, trace_id_var


class TestTraceContext:
    """Тесты для trace_context и get_trace_id."""

    def test_incoming_trace_id_used(self) -> None:
        """Входящий trace_id действует внутри блока и сбрасывается после."""
        before = trace_id_var.get()

        with trace_context("incoming-1") as trace_id:
            assert trace_id == "incoming-1"
            assert get_trace_id() == "incoming-1"

        assert trace_id_var.get() == before

    def test_generated_when_missing(self) -> None:
        """Без входящего trace_id генерируется новый."""
        with trace_context(None) as trace_id:
            assert trace_id
            assert get_trace_id() == trace_id

    def test_nested_contexts_restore(self) -> None:
        """Вложенный контекст восстанавливает внешний trace_id."""
        with trace_context("outer"):
            with trace_context("inner"):
                assert get_trace_id() == "inner"
            assert get_trace_id() == "outer"

    def test_new_trace_id_unique(self) -> None:
        """Сгенерированные trace_id уникальны."""
        assert new_trace_id() != new_trace_id()
