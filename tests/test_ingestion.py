import math
import fitz
import pytest
from spacerag.core.exception import InputError, ProviderError
from spacerag.ingestion.chunker import TextChunker, merge_chunks
from spacerag.ingestion.embedder import EmbeddingProvider
from spacerag.ingestion.pdf_loader import extract_pdf_text, get_pdf_metadata
from spacerag.ingestion.pipeline import IngestionPipeline


def _make_pdf(text: str) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


# ---------- Chunker ----------

def test_short_text_is_single_chunk():
    chunks = TextChunker(100, 20).split_text("Paris is the capital of France.")
    assert chunks == ["Paris is the capital of France."]


@pytest.mark.parametrize("text", ["", "   ", "\n\n\t"])
def test_empty_text_rejected(text):
    with pytest.raises(InputError):
        TextChunker(100, 20).split_text(text)


@pytest.mark.parametrize("size,overlap", [(0, 0), (100, -1), (100, 100), (50, 80)])
def test_invalid_chunker_config(size, overlap):
    with pytest.raises(InputError):
        TextChunker(size, overlap)


def test_hard_cut_chunk_count():
    text = "abcdefghij" * 100
    size, overlap = 100, 20

    chunks = TextChunker(size, overlap).split_text(text)

    assert len(chunks) == math.ceil((len(text) - overlap) / (size - overlap))
    assert all(len(c) <= size for c in chunks)
    for a, b in zip(chunks, chunks[1:]):
        assert a[-overlap:] == b[:overlap]
    assert merge_chunks(chunks, overlap) == text


def test_natural_text_is_bounded_and_overlapping():
    text = " ".join(f"Sentence number {i} talks about topic {i % 7}." for i in range(60))
    size, overlap = 120, 30

    chunks = TextChunker(size, overlap).split_text(text)
    expected = math.ceil((len(text) - overlap) / (size - overlap))

    assert abs(len(chunks) - expected) <= 1
    assert all(len(c) <= size for c in chunks)
    for a, b in zip(chunks, chunks[1:]):
        assert a[-overlap:] == b[:overlap]
    assert merge_chunks(chunks, overlap) == text


@pytest.mark.parametrize(
    "text",
    [
        "\n\n".join(f"Paragraph {i}. " + "x" * 488 for i in range(40)),
        " ".join(f"Sentence number {i} talks about topic {i % 7}." for i in range(3000)),
    ],
)
def test_chunk_count_stays_near_hard_cut_count(text):
    size, overlap = 1000, 200

    chunks = TextChunker(size, overlap).split_text(text)
    expected = math.ceil((len(text) - overlap) / (size - overlap))

    assert abs(len(chunks) - expected) <= 1
    assert all(len(c) <= size for c in chunks)
    for a, b in zip(chunks, chunks[1:]):
        assert a[-overlap:] == b[:overlap]
    assert merge_chunks(chunks, overlap) == text


def test_prefers_sentence_boundary():
    text = "Alpha beta gamma delta. Epsilon zeta eta theta iota kappa."
    chunks = TextChunker(30, 5).split_text(text)

    assert chunks[0] == "Alpha beta gamma delta. "
    assert merge_chunks(chunks, 5) == text


def test_prefers_paragraph_boundary():
    text = "First paragraph is here.\n\nSecond paragraph. With two sentences here."
    chunks = TextChunker(40, 5).split_text(text)

    assert chunks[0] == "First paragraph is here.\n\n"


def test_merge_chunks_empty():
    assert merge_chunks([], 10) == ""


# ---------- Embedder ----------

def test_batch_matches_single_embeddings(embedder):
    texts = ["Paris is in France", "Berlin is in Germany", "nothing known"]
    batch = embedder.embed_batch(texts)

    assert batch == [embedder.embed(t) for t in texts]
    assert len({len(v) for v in batch}) == 1


def test_empty_batch_rejected(embedder):
    with pytest.raises(InputError):
        embedder.embed_batch([])


def test_malformed_provider_output_is_provider_error():
    class ShortProvider(EmbeddingProvider):
        def _encode(self, texts):
            return [[1.0, 0.0]]

    class MixedProvider(EmbeddingProvider):
        def _encode(self, texts):
            return [[1.0, 0.0], [1.0]]

    with pytest.raises(ProviderError):
        ShortProvider().embed_batch(["a", "b"])
    with pytest.raises(ProviderError):
        MixedProvider().embed_batch(["a", "b"])


# ---------- PDF loader ----------

def test_pdf_text_extraction():
    data = _make_pdf("Paris is the capital of France.")

    assert "Paris is the capital of France." in extract_pdf_text(data)
    assert get_pdf_metadata(data)["page_count"] == 1


def test_unreadable_pdf_rejected():
    with pytest.raises(InputError):
        extract_pdf_text(b"definitely not a pdf")


# ---------- Pipeline ----------

def test_ingest_stores_aligned_chunks(pipeline, store, embedder):
    text = " ".join(["Paris is the capital of France."] * 20)

    doc = pipeline.ingest("space-1", "Geography", text)

    assert len(doc.chunk_texts) > 1
    assert len(doc.chunk_texts) == len(doc.chunk_vectors)
    assert doc.text == text
    assert len(embedder.calls) == 1

    stored = store.fetch_all("space-1")
    assert [d.document_id for d in stored] == [doc.document_id]


def test_raw_ingest_is_single_chunk(pipeline):
    text = " ".join(["Berlin is the capital of Germany."] * 20)

    doc = pipeline.ingest("space-1", "Raw", text, split=False)

    assert doc.chunk_texts == [text]
    assert doc.text == text


@pytest.mark.parametrize("title,text", [("Notes", "   "), ("", "Some text"), ("Notes", None)])
def test_ingest_rejects_missing_fields(pipeline, store, title, text):
    with pytest.raises(InputError):
        pipeline.ingest("space-1", title, text)
    assert store.fetch_all("space-1", include_hidden=True) == []


def test_provider_failure_writes_nothing(failing_embedder, store):
    pipeline = IngestionPipeline(embedder=failing_embedder, store=store)

    with pytest.raises(ProviderError):
        pipeline.ingest("space-1", "Geography", "Paris is the capital of France.")
    assert store.fetch_all("space-1", include_hidden=True) == []


def test_ingest_pdf(pipeline, store):
    doc = pipeline.ingest_pdf("space-1", "Atlas", _make_pdf("Rome is the capital of Italy."))

    assert "Rome is the capital of Italy." in doc.text
    assert store.get(doc.document_id).title == "Atlas"
