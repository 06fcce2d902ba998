"""Tests for page-level derivation."""

import pytest

from book_derivatives.page_derivatives import PageDerivatives
from book_derivatives.repository.relationships import (
    HAS_LANGUAGE,
    ISLANDORA_RELS_EXT_URI,
    PREPROCESS,
    RelationshipOverlay,
)
from schemas.page import DerivationOptions


class StubGenerator:
    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def supports(self, kind):
        return True

    def create_derivatives(self, obj):
        self.calls.append(obj.id)
        return self.result


@pytest.fixture
def page(repository, book):
    return repository.add_page(book, "book:1-0001", sequence=1)


@pytest.fixture
def derivatives(tool_config, runner):
    return PageDerivatives(tool_config, runner, image_generator=StubGenerator())


def _scratch_files(scratch_dir):
    return sorted(p.name for p in scratch_dir.iterdir())


class TestDeriveOCRSet:
    """Tests for the OCR pipeline."""

    def test_commits_all_three_datastreams(self, derivatives, page):
        """OCR, RAW_HOCR and ENCODED_OCR are committed on success."""
        assert derivatives.derive_ocr_set(page)

        assert page["OCR"].content == b"Hello WORLD\n"
        assert page["OCR"].mimetype == "text/plain"
        assert b"ocrx_word" in page["RAW_HOCR"].content
        assert page["ENCODED_OCR"].content.startswith(b"<?xml")
        assert b">hello<" in page["ENCODED_OCR"].content

    def test_defaults_when_nothing_recorded(self, derivatives, runner, page, tool_config):
        """Without recorded options OCR runs in English without preprocessing."""
        derivatives.derive_ocr_set(page)

        assert runner.commands_for(tool_config.gimp_path) == []
        for command in runner.commands_for(tool_config.tesseract_path):
            assert command[3:5] == ["-l", "eng"]

    def test_recorded_options_are_used(self, derivatives, runner, page, tool_config):
        """Options stored on the page apply when none are given."""
        overlay = RelationshipOverlay(page.relationships)
        overlay.set_value(HAS_LANGUAGE, "fra")
        overlay.set_value(PREPROCESS, True)

        assert derivatives.derive_ocr_set(page)

        assert len(runner.commands_for(tool_config.gimp_path)) == 1
        tesseract = runner.commands_for(tool_config.tesseract_path)
        assert all(c[1].endswith("_preprocessed.tif") for c in tesseract)
        assert all(c[4] == "fra" for c in tesseract)

    def test_options_are_recorded_with_replace_semantics(self, derivatives, page):
        """The options used replace whatever was recorded before."""
        page.relationships.add(ISLANDORA_RELS_EXT_URI, HAS_LANGUAGE, "deu", literal=True)

        derivatives.derive_ocr_set(page, DerivationOptions(language="fra", preprocess=True))

        assert derivatives.ocr_options(page) == DerivationOptions(language="fra", preprocess=True)
        assert len(page.relationships.get(ISLANDORA_RELS_EXT_URI, HAS_LANGUAGE)) == 1

    def test_preprocess_failure_falls_back_to_source(
        self, derivatives, runner, page, tool_config
    ):
        """A failed preprocessing step does not abort OCR."""
        runner.fail(tool_config.gimp_path)

        assert derivatives.derive_ocr_set(page, DerivationOptions(preprocess=True))

        tesseract = runner.commands_for(tool_config.tesseract_path)
        assert all(c[1].endswith("book_1-0001_OBJ.tif") for c in tesseract)
        assert len(derivatives.preprocessor.failures) == 1

    def test_hocr_failure_skips_encoding_but_keeps_text(
        self, derivatives, page, tool_config, scratch_dir
    ):
        """Plain text still commits when HOCR fails; the set is reported failed."""

        class HocrFailingRunner:
            def __init__(self, inner):
                self.inner = inner

            def run(self, command):
                if command[-1] == "hocr":
                    from book_derivatives.process import ProcessResult

                    return ProcessResult(command=command, exit_code=1, stderr="boom")
                return self.inner.run(command)

        derivatives.ocr_converter.runner = HocrFailingRunner(derivatives.runner)

        assert not derivatives.derive_ocr_set(page)

        assert "OCR" in page
        assert "RAW_HOCR" not in page
        assert "ENCODED_OCR" not in page
        assert _scratch_files(scratch_dir) == []

    def test_malformed_hocr_keeps_raw_hocr(self, derivatives, runner, page):
        """HOCR that cannot be encoded is still committed raw."""
        runner.hocr = b"<html><body><p>unclosed</body></html>"

        assert not derivatives.derive_ocr_set(page)

        assert "OCR" in page
        assert "RAW_HOCR" in page
        assert "ENCODED_OCR" not in page

    @pytest.mark.parametrize(
        "xslt_content",
        [None, "<not-a-stylesheet/>"],
        ids=["missing", "invalid"],
    )
    def test_unusable_transform_keeps_text_and_raw_hocr(
        self, tool_config, runner, page, tmp_path, scratch_dir, xslt_content
    ):
        """An encoder error fails the set without losing OCR or RAW_HOCR."""
        xslt = tmp_path / "hocr.xsl"
        if xslt_content is not None:
            xslt.write_text(xslt_content)
        config = tool_config.model_copy(update={"hocr_xslt_path": xslt})
        derivatives = PageDerivatives(config, runner)

        assert derivatives.derive_ocr_set(page) is False

        assert page["OCR"].content == b"Hello WORLD\n"
        assert "RAW_HOCR" in page
        assert "ENCODED_OCR" not in page
        assert _scratch_files(scratch_dir) == []

    def test_preprocess_skipped_without_gimp(
        self, tool_config, runner, page, tmp_path
    ):
        """A missing GIMP is never started; OCR uses the original image."""
        config = tool_config.model_copy(update={"gimp_path": str(tmp_path / "no-gimp")})
        derivatives = PageDerivatives(config, runner)

        assert derivatives.derive_ocr_set(page, DerivationOptions(preprocess=True))

        assert runner.commands_for(config.gimp_path) == []
        tesseract = runner.commands_for(config.tesseract_path)
        assert all(c[1].endswith("book_1-0001_OBJ.tif") for c in tesseract)

    def test_failures_collects_tool_errors(self, derivatives, runner, page, tool_config):
        """failures() lists every failed tool run."""
        runner.fail(tool_config.tesseract_path)

        derivatives.derive_ocr_set(page)

        failures = derivatives.failures()
        assert len(failures) == 2
        assert all(f.command[0] == tool_config.tesseract_path for f in failures)
        assert failures[1].command[-1] == "hocr"

    def test_text_failure_does_not_record_options(
        self, derivatives, runner, page, tool_config
    ):
        runner.fail(tool_config.tesseract_path)

        assert not derivatives.derive_ocr_set(page, DerivationOptions(language="fra"))

        assert "OCR" not in page
        assert page.relationships.get(ISLANDORA_RELS_EXT_URI, HAS_LANGUAGE) == []

    def test_disabled_language_is_rejected(self, derivatives, runner, page):
        """No tool runs for a language that is not enabled."""
        assert not derivatives.derive_ocr_set(page, DerivationOptions(language="kor"))

        assert runner.commands == []

    def test_missing_source(self, derivatives, runner, repository, book):
        page = repository.add_page(book, "book:1-0002", obj=None)

        assert not derivatives.derive_ocr_set(page)
        assert runner.commands == []

    def test_intermediate_files_are_removed(self, derivatives, page, scratch_dir):
        """Source, preprocessed, HOCR and encoded files are deleted afterwards."""
        derivatives.derive_ocr_set(page, DerivationOptions(preprocess=True))

        assert _scratch_files(scratch_dir) == []

    def test_rerun_is_idempotent(self, derivatives, page):
        """Deriving twice from an unchanged source gives identical output."""
        derivatives.derive_ocr_set(page)
        first = {dsid: page[dsid].content for dsid in ("OCR", "RAW_HOCR", "ENCODED_OCR")}

        derivatives.derive_ocr_set(page)
        second = {dsid: page[dsid].content for dsid in ("OCR", "RAW_HOCR", "ENCODED_OCR")}

        assert first == second
        assert page["OCR"].versions == 2


class TestDerivePDF:
    """Tests for the page PDF."""

    def test_commits_pdf(self, derivatives, page, scratch_dir):
        assert derivatives.derive_pdf(page)

        assert page["PDF"].mimetype == "application/pdf"
        assert page["PDF"].content.startswith(b"%PDF")
        assert _scratch_files(scratch_dir) == []

    def test_failed_conversion(self, derivatives, runner, page, tool_config, scratch_dir):
        """A failed conversion commits nothing and cleans up the source."""
        runner.fail(tool_config.convert_path)

        assert not derivatives.derive_pdf(page)

        assert "PDF" not in page
        assert _scratch_files(scratch_dir) == []


class TestDeriveImages:
    """Tests for image derivatives."""

    def test_delegates_to_generator(self, derivatives, page):
        assert derivatives.derive_images(page)
        assert derivatives.image_generator.calls == ["book:1-0001"]

    def test_without_generator(self, tool_config, runner, page):
        assert not PageDerivatives(tool_config, runner).derive_images(page)


class TestDeriveAll:
    def test_runs_every_supported_derivative(self, derivatives, page):
        assert derivatives.derive_all(page)

        for dsid in ("OCR", "RAW_HOCR", "ENCODED_OCR", "PDF"):
            assert dsid in page
        assert derivatives.image_generator.calls == ["book:1-0001"]
