"""Tests for the file-backed topic queue."""

import threading

import pytest

from src.common.errors import EmptyQueue
from src.content_engine.topic_queue import TopicQueue


def _read_bytes(path):
    return path.read_bytes()


class TestDequeue:
    def test_missing_file_is_empty(self, topics_file):
        with pytest.raises(EmptyQueue):
            TopicQueue(topics_file).dequeue()

    def test_empty_file_is_empty(self, topics_file):
        topics_file.write_text("", encoding="utf-8")
        with pytest.raises(EmptyQueue):
            TopicQueue(topics_file).dequeue()

    def test_returns_first_line_and_removes_it(self, topics_file):
        topics_file.write_text("First topic\nSecond topic\n", encoding="utf-8")
        queue = TopicQueue(topics_file)
        assert queue.dequeue() == "First topic"
        assert topics_file.read_text(encoding="utf-8") == "Second topic\n"

    def test_strips_carriage_return(self, topics_file):
        topics_file.write_bytes(b"Windows topic\r\nNext\r\n")
        assert TopicQueue(topics_file).dequeue() == "Windows topic"

    def test_blank_first_line_is_consumed(self, topics_file):
        topics_file.write_text("\nReal topic\n", encoding="utf-8")
        queue = TopicQueue(topics_file)
        assert queue.dequeue() == ""
        assert queue.dequeue() == "Real topic"


class TestRequeue:
    def test_single_topic_scenario(self, topics_file):
        topics_file.write_text("Best trail shoes 2024", encoding="utf-8")
        queue = TopicQueue(topics_file)

        topic = queue.dequeue()
        assert topic == "Best trail shoes 2024"
        assert topics_file.read_text(encoding="utf-8") == ""

        queue.requeue(topic)
        assert topics_file.read_text(encoding="utf-8").splitlines() == ["Best trail shoes 2024"]

    @pytest.mark.parametrize(
        "content",
        [
            b"Best trail shoes 2024\n",
            b"One\nTwo\nThree\n",
            b"Topic with trailing blank\n\n",
        ],
    )
    def test_dequeue_then_requeue_restores_file(self, topics_file, content):
        topics_file.write_bytes(content)
        queue = TopicQueue(topics_file)
        topic = queue.dequeue()
        queue.requeue(topic)
        assert _read_bytes(topics_file) == content

    def test_requeue_prepends(self, topics_file):
        topics_file.write_text("Existing\n", encoding="utf-8")
        TopicQueue(topics_file).requeue("Urgent")
        assert topics_file.read_text(encoding="utf-8") == "Urgent\nExisting\n"

    def test_no_temp_files_left_behind(self, topics_file):
        topics_file.write_text("A\nB\n", encoding="utf-8")
        queue = TopicQueue(topics_file)
        queue.requeue(queue.dequeue())
        assert [p.name for p in topics_file.parent.iterdir()] == [topics_file.name]


class TestAddAndPending:
    def test_add_appends_with_newline(self, topics_file):
        topics_file.write_text("First", encoding="utf-8")
        queue = TopicQueue(topics_file)
        queue.add("Second")
        assert topics_file.read_text(encoding="utf-8") == "First\nSecond\n"

    def test_add_creates_file(self, topics_file):
        TopicQueue(topics_file).add("New")
        assert topics_file.read_text(encoding="utf-8") == "New\n"

    def test_pending_skips_blank_lines(self, topics_file):
        topics_file.write_text("A\n\n  \nB\n", encoding="utf-8")
        assert TopicQueue(topics_file).pending() == ["A", "B"]


class TestConcurrency:
    def test_parallel_dequeues_never_return_the_same_topic(self, topics_file):
        topics = [f"Topic {i}" for i in range(40)]
        topics_file.write_text("\n".join(topics) + "\n", encoding="utf-8")
        queue = TopicQueue(topics_file)
        taken = []
        lock = threading.Lock()

        def worker():
            for _ in range(10):
                topic = queue.dequeue()
                with lock:
                    taken.append(topic)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(taken) == sorted(topics)
        assert topics_file.read_text(encoding="utf-8") == ""
