"""Tests for StreamingText fed from worker threads."""

from __future__ import annotations

import threading

from lotus.tui.components import StreamingText


class CountingContext:
    def __init__(self) -> None:
        self.count = 0
        self._lock = threading.Lock()

    def rerender(self) -> None:
        with self._lock:
            self.count += 1


class TestStreamingText:
    def test_append_and_finish(self) -> None:
        ctx = CountingContext()
        stream = StreamingText("out", ctx)
        stream.append("Hel")
        stream.append("lo")
        assert stream.content == "Hello"
        assert stream.render().plain_text() == "Hello▌"
        stream.finish()
        assert stream.done
        assert stream.render().plain_text() == "Hello"
        assert ctx.count == 3

    def test_reset(self) -> None:
        stream = StreamingText()
        stream.append("x")
        stream.finish()
        stream.reset()
        assert stream.content == ""
        assert not stream.done

    def test_render_is_scrollable(self) -> None:
        tree = StreamingText("out", cursor="_").render()
        assert tree.id == "out"
        assert tree.styles["overflow"] == "auto"
        assert tree.plain_text() == "_"

    def test_concurrent_producers(self) -> None:
        ctx = CountingContext()
        stream = StreamingText(ctx=ctx)

        def produce(tag: str) -> None:
            for _ in range(200):
                stream.append(tag)

        workers = [threading.Thread(target=produce, args=(tag,)) for tag in "abcd"]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        content = stream.content
        assert len(content) == 800
        assert all(content.count(tag) == 200 for tag in "abcd")
        assert ctx.count == 800

    def test_state(self) -> None:
        stream = StreamingText("out")
        stream.append("partial")
        restored = StreamingText("out")
        restored.load_state(stream.save_state())
        assert restored.content == "partial"
        assert not restored.done

    def test_update_props_keeps_content(self) -> None:
        ctx = CountingContext()
        stream = StreamingText("out")
        stream.append("kept")
        stream.update_props(StreamingText("out", ctx, cursor="|"))
        assert stream.content == "kept"
        assert stream.ctx is ctx
        assert stream.cursor == "|"
