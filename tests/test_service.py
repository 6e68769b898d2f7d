"""
Tests for the medical RAG service: lazy initialization and the
request/response envelope.
"""

import asyncio
import threading

import pytest
from unittest.mock import MagicMock, patch

from medical_rag_pipeline.audit import InMemoryAuditSink
from medical_rag_pipeline.core import PipelineConfig
from medical_rag_pipeline.pipeline import (
    InitState,
    MedicalRAGService,
    get_medical_rag_service,
    reset_medical_rag_service,
)
from medical_rag_pipeline.retrieval import get_medical_documents
from medical_rag_pipeline.schemas.api import QueryRequest
from medical_rag_pipeline.triage import EMERGENCY_WARNING, IN_PERSON_CARE_WARNING

DIM = 4096


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def config():
    return PipelineConfig(embedding_dim=DIM, use_mock_embeddings=True, use_mock_generation=True)


@pytest.fixture
def loader():
    return MagicMock(return_value=get_medical_documents())


@pytest.fixture
def audit():
    return InMemoryAuditSink()


@pytest.fixture
def service(config, loader, audit):
    return MedicalRAGService(config=config, audit_sink=audit, document_loader=loader)


# ---------------------------------------------------------------------------
# INITIALIZATION
# ---------------------------------------------------------------------------


class TestInitialization:
    def test_lazy(self, service, loader):
        assert service.state is InitState.UNINITIALIZED
        loader.assert_not_called()

    def test_initializes_once(self, service, loader):
        service.handle_request({"text": "hypertension"})
        service.handle_request({"text": "diabetes"})

        loader.assert_called_once()
        assert service.state is InitState.READY
        assert len(service.store) == 5

    def test_concurrent_callers_share_one_initialization(self, service, loader):
        threads = [threading.Thread(target=service.initialize) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        loader.assert_called_once()
        assert service.state is InitState.READY

    def test_failed_initialization_is_retried(self, config, audit):
        loader = MagicMock(side_effect=[RuntimeError("seed file missing"), get_medical_documents()])
        service = MedicalRAGService(config=config, audit_sink=audit, document_loader=loader)

        first = service.handle_request({"text": "hypertension"})
        assert first.status_code == 503
        assert first.code == "RAG_INIT_ERROR"
        assert service.state is InitState.FAILED
        assert service.status()["error"] is not None

        second = service.handle_request({"text": "hypertension"})
        assert second.status_code == 200
        assert service.state is InitState.READY
        assert loader.call_count == 2

    def test_ainitialize(self, service):
        asyncio.run(service.ainitialize())
        assert service.state is InitState.READY


# ---------------------------------------------------------------------------
# ENVELOPE
# ---------------------------------------------------------------------------


class TestHandleRequest:
    def test_success(self, service):
        reply = service.handle_request({"text": "hypertension blood pressure", "patientId": "p-9"})

        assert reply.success is True
        assert reply.status_code == 200
        assert reply.response.sources[0].id == "cardio-001"
        assert reply.metadata.documents_used == len(reply.response.sources)
        assert reply.metadata.query_id
        assert reply.metadata.response_id

    def test_accepts_request_model(self, service):
        reply = service.handle_request(QueryRequest(text="flu fever cough"))
        assert reply.success is True

    def test_wire_format(self, service):
        wire = service.handle_request({"text": "hypertension"}).to_wire()

        assert set(wire) == {"success", "response", "metadata"}
        assert {"queryId", "processingTimeMs", "documentsUsed", "ragType", "version"} <= set(wire["metadata"])
        assert wire["metadata"]["ragType"] == "in-memory"
        for source in wire["response"]["sources"]:
            assert {"id", "title", "source", "reliability", "excerpt"} <= set(source)

    def test_defaults_patient_and_session(self, service, audit):
        service.handle_request({"text": "hypertension"})

        record = audit.records[0]
        assert record.patient_id == "anonymous"
        assert record.session_id.startswith("session-")

    def test_keeps_given_session(self, service, audit):
        service.handle_request({"text": "hypertension", "sessionId": "abc"})
        assert audit.records[0].session_id == "abc"

    @pytest.mark.parametrize("payload", [{}, {"text": ""}, {"text": "   "}, {"text": None}])
    def test_missing_text(self, service, payload):
        reply = service.handle_request(payload)

        assert reply.success is False
        assert reply.status_code == 400
        assert reply.code == "MISSING_TEXT"
        assert reply.response.answer
        assert reply.response.confidence == 0.0

    def test_malformed_body(self, service):
        reply = service.handle_request(["not", "an", "object"])

        assert reply.status_code == 400
        assert reply.code == "INVALID_REQUEST"

    def test_init_failure_flags_emergency(self, config):
        on_emergency = MagicMock()
        service = MedicalRAGService(
            config=config,
            audit_sink=InMemoryAuditSink(),
            document_loader=MagicMock(side_effect=RuntimeError("boom")),
            on_emergency=on_emergency,
        )

        reply = service.handle_request({"text": "chest pain", "patientId": "p-2"})

        assert reply.status_code == 503
        assert reply.response.warnings[0] == EMERGENCY_WARNING
        assert IN_PERSON_CARE_WARNING in reply.response.warnings
        assert on_emergency.call_args.args[0].patient_id == "p-2"

    def test_unexpected_error_is_internal(self, service):
        service.initialize()
        service.orchestrator.process = MagicMock(side_effect=RuntimeError("bug"))

        reply = service.handle_request({"text": "hypertension"})

        assert reply.status_code == 500
        assert reply.code == "INTERNAL_ERROR"
        assert reply.error == "Internal error"
        assert reply.response.confidence == 0.0

    def test_internal_error_after_signal_does_not_signal_twice(self, config, audit):
        on_emergency = MagicMock()
        service = MedicalRAGService(
            config=config,
            audit_sink=audit,
            document_loader=get_medical_documents,
            on_emergency=on_emergency,
        )

        with patch(
            "medical_rag_pipeline.observability.attributes.retrieval_attributes",
            side_effect=RuntimeError("bad span attribute"),
        ):
            reply = service.handle_request({"text": "chest pain"})

        assert reply.status_code == 500
        assert reply.response.warnings[0] == EMERGENCY_WARNING
        on_emergency.assert_called_once()

    def test_ahandle_request(self, service):
        reply = asyncio.run(service.ahandle_request({"text": "anxiety worry"}))
        assert reply.success is True


# ---------------------------------------------------------------------------
# STATUS & SINGLETON
# ---------------------------------------------------------------------------


class TestStatus:
    def test_before_initialization(self, service):
        status = service.status()

        assert status["healthy"] is False
        assert status["state"] == "uninitialized"
        assert status["store"] is None

    def test_after_initialization(self, service):
        service.initialize()
        status = service.status()

        assert status["healthy"] is True
        assert status["store"]["documents"] == 5
        assert status["store"]["specialities"]["Cardiology"] == 1


class TestSingleton:
    def teardown_method(self):
        reset_medical_rag_service()

    def test_same_instance(self):
        assert get_medical_rag_service() is get_medical_rag_service()

    def test_reset(self):
        first = get_medical_rag_service()
        reset_medical_rag_service()
        assert get_medical_rag_service() is not first
