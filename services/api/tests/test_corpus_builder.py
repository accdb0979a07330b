from types import SimpleNamespace

import pytest

from app.infra.corpus_builder import build_records, iter_documents, write_corpus
from app.services.corpus import load_corpus


class FakeEmbeddings:
    def __init__(self):
        self.inputs = []

    def create(self, *, model, input):
        self.inputs.append((model, input))
        return SimpleNamespace(data=[SimpleNamespace(embedding=[float(len(input)), 1.0])])


@pytest.fixture
def docs_dir(tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "b_precios.md").write_text("El plan básico cuesta 10 euros.", encoding="utf-8")
    (docs / "a_horario.txt").write_text("Abrimos de 9 a 18." * 3, encoding="utf-8")
    (docs / ".oculto").write_text("no", encoding="utf-8")
    (docs / "anidado").mkdir()
    return docs


def test_iter_documents_skips_hidden_and_directories(docs_dir):
    assert [name for name, _ in iter_documents(docs_dir)] == ["a_horario.txt", "b_precios.md"]


def test_build_and_write_corpus(docs_dir, tmp_path, make_settings):
    embeddings = FakeEmbeddings()
    client = SimpleNamespace(embeddings=embeddings)
    settings = make_settings(corpus_text_limit=20)

    records = build_records(client, docs_dir, settings=settings, delay_seconds=0)
    output = tmp_path / "vectors.json"
    write_corpus(records, output)
    corpus = load_corpus(output)

    assert [model for model, _ in embeddings.inputs] == ["text-embedding-3-small"] * 2
    assert embeddings.inputs[0][1] == "Abrimos de 9 a 18." * 3
    assert [record.id for record in corpus.records] == ["a_horario.txt", "b_precios.md"]
    assert all(len(record.text) <= 20 for record in corpus.records)
    assert corpus.records[0].vector == [54.0, 1.0]
