import os

from PIL import Image

from core.cancellation import CancellationToken
from core.data_structures import ExportOptions, LayerKind, SessionStatus
from core.errors import HostError
from core.folder_export import FolderExportEngine, build_export_path, sanitize_filename
from host.memory_host import MemoryHost
from utils.session_log import SessionLog


def make_engine(host, recorder, directory, token=None, **options):
    return FolderExportEngine(
        host,
        ExportOptions(directory=str(directory), **options),
        token=token,
        log=SessionLog(recorder.log),
        progress_callback=recorder.progress,
    )


def visibility(document):
    return {record.name: record.visible for record in document.walk()}


def test_sanitize_filename():
    assert sanitize_filename('a\\b/c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"
    assert sanitize_filename("Icons") == "Icons"


def test_build_export_path():
    options = ExportOptions(format="jpg")
    assert build_export_path("/out", "A/B", options) == os.path.join("/out", "A_B.jpg")


def test_exports_one_file_per_folder(folder_host, recorder, tmp_path):
    engine = make_engine(folder_host, recorder, tmp_path)
    result = engine.run()

    assert result.status == SessionStatus.COMPLETED
    assert sorted(os.listdir(tmp_path)) == ["A_B.png", "Icons_.png", "Inner.png"]
    assert recorder.increments == [1, 1, 1]
    assert engine.report.failed_folders == []
    assert engine.report.attempted == 3


def test_exported_images_contain_only_the_folder(folder_host, recorder, tmp_path):
    make_engine(folder_host, recorder, tmp_path).run()

    with Image.open(tmp_path / "A_B.png") as image:
        assert image.convert("RGBA").getpixel((2, 2)) == (255, 0, 0, 255)
    with Image.open(tmp_path / "Icons_.png") as image:
        assert image.convert("RGBA").getpixel((2, 2)) == (0, 0, 255, 255)
    with Image.open(tmp_path / "Inner.png") as image:
        rgba = image.convert("RGBA")
        assert rgba.getpixel((0, 0)) == (0, 0, 0, 255)
        assert rgba.getpixel((2, 2))[3] == 0


def test_isolation_and_restore(folder_document, recorder, tmp_path):
    seen = {}

    class ObservingHost(MemoryHost):
        def export_image(self, path, options):
            seen[os.path.basename(path)] = visibility(self.document)
            super().export_image(path, options)

    before = visibility(folder_document)
    make_engine(ObservingHost(folder_document), recorder, tmp_path).run()

    ab = seen["A_B.png"]
    assert ab["A/B"] is True
    assert ab["Icons?"] is False
    assert ab["Background"] is False
    # Descendants keep their own visibility
    assert ab["Inner"] is False
    assert ab["red"] is True

    inner = seen["Inner.png"]
    assert inner["Inner"] is True
    assert inner["A/B"] is True
    assert inner["red"] is False

    assert visibility(folder_document) == before


def test_failed_folder_does_not_stop_the_batch(folder_document, recorder, tmp_path):
    class FlakyHost(MemoryHost):
        def export_image(self, path, options):
            if path.endswith("A_B.png"):
                raise HostError("disk full")
            super().export_image(path, options)

    before = visibility(folder_document)
    engine = make_engine(FlakyHost(folder_document), recorder, tmp_path)
    result = engine.run()

    assert result.status == SessionStatus.COMPLETED
    assert engine.report.failed_folders == ["A/B"]
    assert sorted(os.listdir(tmp_path)) == ["Icons_.png", "Inner.png"]
    assert any("A/B" in message for message in recorder.messages("ERROR"))
    assert visibility(folder_document) == before


def test_cancel_between_folders(folder_host, recorder, tmp_path):
    token = CancellationToken()

    def progress(increment):
        recorder.progress(increment)
        token.request()

    engine = FolderExportEngine(
        folder_host,
        ExportOptions(directory=str(tmp_path)),
        token=token,
        log=SessionLog(recorder.log),
        progress_callback=progress,
    )
    result = engine.run()

    assert result.status == SessionStatus.CANCELLED
    assert os.listdir(tmp_path) == ["A_B.png"]


def test_no_folders(masked_document, recorder, tmp_path):
    for record in list(masked_document.walk()):
        if record.layer_id in masked_document and record.kind == LayerKind.FOLDER:
            masked_document.remove(record.layer_id)

    result = make_engine(MemoryHost(masked_document), recorder, tmp_path).run()

    assert result.status == SessionStatus.NO_TARGETS
    assert result.message == "no folders"
    assert os.listdir(tmp_path) == []


def test_no_directory(folder_host, recorder):
    engine = FolderExportEngine(folder_host, ExportOptions(), log=SessionLog(recorder.log))
    result = engine.run()
    assert result.status == SessionStatus.FAILED
    assert result.message == "No output directory selected."


def test_no_document(recorder, tmp_path):
    result = make_engine(MemoryHost(), recorder, tmp_path).run()
    assert result.status == SessionStatus.NO_DOCUMENT


def test_jpeg_export_is_rgb(folder_host, recorder, tmp_path):
    make_engine(folder_host, recorder, tmp_path, format="JPG", quality=90).run()
    with Image.open(tmp_path / "Icons_.jpg") as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"
        r, g, b = image.getpixel((2, 2))
        assert b > 200 and r < 50 and g < 50


def test_snapshot_failure_skips_only_that_folder(folder_document, tmp_path):
    class OneBadReadHost(MemoryHost):
        fail_next_read = False

        def root_ids(self):
            if self.fail_next_read:
                self.fail_next_read = False
                raise HostError("transient read failure")
            return super().root_ids()

    host = OneBadReadHost(folder_document)
    lines = []
    increments = []

    def log(message, level="INFO"):
        lines.append((level, message))
        # Fail the visibility capture of the first folder only
        if message.startswith("Processing folder 1/"):
            host.fail_next_read = True

    engine = FolderExportEngine(
        host, ExportOptions(directory=str(tmp_path)), log=SessionLog(log),
        progress_callback=increments.append,
    )
    before = visibility(folder_document)
    result = engine.run()

    assert result.status == SessionStatus.COMPLETED
    assert engine.report.failed_folders == ["A/B"]
    assert increments == [1, 1, 1]
    assert sorted(os.listdir(tmp_path)) == ["Icons_.png", "Inner.png"]
    assert visibility(folder_document) == before
