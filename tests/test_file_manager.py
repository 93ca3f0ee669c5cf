"""Tests for file-based storage manager."""

import json
import threading
from pathlib import Path

import pytest

from supplier_eval.exceptions import StorageError
from supplier_eval.models.model_criteria import Category, CategoryType, Provider
from supplier_eval.models.model_evaluation import EvaluationRecord
from supplier_eval.models.model_selection import EventStatus, SelectionEvent
from supplier_eval.storage.permanent_storage.file_manager import FileManager


@pytest.fixture
def sample_record() -> EvaluationRecord:
    return EvaluationRecord(
        id="eval-1",
        provider_id="prov-1",
        category_id="cat-goods",
        evaluation_type=CategoryType.BIENES,
        scores={"price": 3},
        weights_used={"price": 1.0},
        total_score=3.0,
        is_action_plan_required=True,
    )


class TestFileManager:
    """Tests for FileManager class."""

    def test_save_and_load_provider(self, file_manager: FileManager, provider: Provider) -> None:
        path = file_manager.save_provider(provider)

        assert path.exists()
        assert path.parent.name == "providers"
        loaded = file_manager.load_provider(provider.id)
        assert loaded == provider

    def test_load_missing_returns_none(self, file_manager: FileManager) -> None:
        assert file_manager.load_provider("nope") is None
        assert file_manager.load_category("nope") is None
        assert file_manager.load_evaluation("nope") is None
        assert file_manager.load_event("nope") is None

    def test_providers_in_category(self, seeded_storage: FileManager) -> None:
        goods = [p.id for p in seeded_storage.list_providers_in_category("cat-goods")]
        services = [p.id for p in seeded_storage.list_providers_in_category("cat-services")]
        assert goods == ["prov-1", "prov-2"]
        assert services == ["prov-1"]

    def test_category_round_trip(self, file_manager: FileManager, goods_category: Category) -> None:
        file_manager.save_category(goods_category)
        assert file_manager.list_categories() == [goods_category]

    def test_saved_file_format(
        self, file_manager: FileManager, sample_record: EvaluationRecord
    ) -> None:
        path = file_manager.save_evaluation(sample_record)

        content = json.loads(path.read_text())
        assert content["key"] == "eval-1"
        assert content["category"] == "evaluations"
        assert "saved_at" in content
        assert content["data"]["total_score"] == 3.0
        assert not list(path.parent.glob("*.tmp"))

    def test_list_evaluations_by_provider(
        self, file_manager: FileManager, sample_record: EvaluationRecord
    ) -> None:
        file_manager.save_evaluation(sample_record)
        file_manager.save_evaluation(
            sample_record.model_copy(update={"id": "eval-2", "provider_id": "prov-2"})
        )

        assert [r.id for r in file_manager.list_evaluations()] == ["eval-1", "eval-2"]
        assert [r.id for r in file_manager.list_evaluations("prov-2")] == ["eval-2"]

    def test_delete_evaluation(
        self, file_manager: FileManager, sample_record: EvaluationRecord
    ) -> None:
        file_manager.save_evaluation(sample_record)
        assert file_manager.delete_evaluation("eval-1")
        assert not file_manager.delete_evaluation("eval-1")

    def test_save_evaluation_if(
        self, file_manager: FileManager, sample_record: EvaluationRecord
    ) -> None:
        file_manager.save_evaluation(sample_record)
        updated = sample_record.model_copy(update={"comments": "revisado"})

        assert not file_manager.save_evaluation_if(updated, lambda current: current is None)
        assert file_manager.load_evaluation("eval-1").comments == ""

        assert file_manager.save_evaluation_if(
            updated, lambda current: current is not None and current.comments == ""
        )
        assert file_manager.load_evaluation("eval-1").comments == "revisado"

    def test_save_event_if(self, file_manager: FileManager) -> None:
        event = SelectionEvent(id="evt-1", name="Cables", type=CategoryType.BIENES)
        file_manager.save_event(event)
        closed = event.model_copy(update={"status": EventStatus.CERRADO})

        assert file_manager.save_event_if(
            closed, lambda current: current.status == EventStatus.ABIERTO
        )
        assert not file_manager.save_event_if(
            closed, lambda current: current.status == EventStatus.ABIERTO
        )
        assert file_manager.list_events()[0].status == EventStatus.CERRADO

    def test_data_summary(self, seeded_storage: FileManager) -> None:
        summary = seeded_storage.get_data_summary()
        assert summary["providers"]["count"] == 2
        assert summary["categories"]["count"] == 2
        assert summary["evaluations"]["count"] == 0


class TestPermanentStorage:
    """Tests for the generic key-value interface."""

    def test_save_load_delete(self, file_manager: FileManager) -> None:
        file_manager.save("k1", {"a": 1}, "misc")

        assert file_manager.exists("k1", "misc")
        assert file_manager.load("k1", "misc") == {"a": 1}
        assert file_manager.list_keys("misc") == ["k1"]
        assert file_manager.delete("k1", "misc")
        assert not file_manager.exists("k1", "misc")
        assert file_manager.load("k1", "misc") is None

    def test_list_keys_missing_category(self, file_manager: FileManager) -> None:
        assert file_manager.list_keys("nothing") == []

    def test_save_if_absent(self, file_manager: FileManager) -> None:
        assert file_manager.save_if("k1", {"v": 1}, "misc", lambda current: current is None)
        assert not file_manager.save_if("k1", {"v": 2}, "misc", lambda current: current is None)
        assert file_manager.load("k1", "misc") == {"v": 1}

    def test_corrupt_file_loads_as_none(self, file_manager: FileManager, temp_dir: Path) -> None:
        (temp_dir / "misc").mkdir()
        (temp_dir / "misc" / "broken.json").write_text("{not json")
        assert file_manager.load("broken", "misc") is None

    def test_save_if_waits_for_other_manager(self, temp_dir: Path) -> None:
        first = FileManager(temp_dir)
        second = FileManager(temp_dir)
        first.save("k1", {"v": 0}, "misc")
        results = []

        def conditional_write() -> None:
            results.append(
                second.save_if("k1", {"v": 2}, "misc", lambda current: current["v"] == 0)
            )

        with first.locked("k1", "misc"):
            worker = threading.Thread(target=conditional_write)
            worker.start()
            worker.join(timeout=0.2)
            assert worker.is_alive()
            first.save("k1", {"v": 1}, "misc")

        worker.join(timeout=5)
        assert results == [False]
        assert second.load("k1", "misc") == {"v": 1}

    def test_lock_timeout_raises_storage_error(self, temp_dir: Path) -> None:
        holder = FileManager(temp_dir)
        impatient = FileManager(temp_dir, lock_timeout=0.1)

        with holder.locked("k1", "misc"):
            with pytest.raises(StorageError) as exc_info:
                impatient.save("k1", {"v": 1}, "misc")

        assert exc_info.value.context["key"] == "k1"
        assert impatient.load("k1", "misc") is None
        impatient.save("k1", {"v": 1}, "misc")
        assert holder.load("k1", "misc") == {"v": 1}
