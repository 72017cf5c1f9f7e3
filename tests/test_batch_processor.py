import io
import zipfile
import pytest
from cracha.core.archive import ZipArchiveWriter
from cracha.core.batch_processor import BatchProcessor
from cracha.core.errors import ArchiveFinalizationError, InvalidRadiusError
from cracha.core.models import InputPhoto
from conftest import make_image


class FailingArchiveWriter:
    def add(self, entry_name, data):
        pass

    def finalize(self):
        raise OSError("Sem espaço em disco")


class ExplodingTranscoder:
    def transcode(self, photo, radius_percent):
        raise RuntimeError("falha inesperada")


def archive_names(result):
    with zipfile.ZipFile(io.BytesIO(result.archive)) as archive:
        return sorted(archive.namelist())


def make_batch(face_photo, faceless_photo):
    return [
        InputPhoto("MTI001 - Ana.png", face_photo),
        InputPhoto("MTI002_Bruno.jpg", face_photo),
        InputPhoto("12345.Carla.Souza.png", face_photo),
        InputPhoto("Employee_67890.jpeg", faceless_photo),
        InputPhoto("MTI003 Daniel.png", face_photo),
    ]


def test_partial_failure_batch(processor, face_photo, faceless_photo):
    result = processor.process(make_batch(face_photo, faceless_photo), 20)

    assert [entry.filename for entry in result.succeeded] == [
        "MTI001.jpg", "MTI002.jpg", "12345.jpg", "MTI003.jpg"
    ]
    assert result.succeeded[0].identifier == "MTI001"
    assert result.succeeded[0].original_filename == "MTI001 - Ana.png"

    assert len(result.failed) == 1
    failure = result.failed[0]
    assert failure.filename == "Employee_67890.jpeg"
    assert failure.error_type == "NoFaceDetectedError"
    assert "Nenhuma face" in failure.reason

    assert archive_names(result) == ["12345.jpg", "MTI001.jpg", "MTI002.jpg", "MTI003.jpg"]


def test_accepts_filename_bytes_pairs(processor, face_photo):
    result = processor.process([("MTI77 - Eva.png", face_photo)], 50)
    assert result.succeeded_identifiers() == ["MTI77"]


def test_archive_failure_propagates(transcoder, face_photo):
    processor = BatchProcessor(transcoder, archive_factory=FailingArchiveWriter)

    with pytest.raises(ArchiveFinalizationError):
        processor.process([InputPhoto("MTI1.png", face_photo)], 20)


def test_rerun_gives_same_result(processor, face_photo, faceless_photo):
    photos = make_batch(face_photo, faceless_photo)
    first = processor.process(photos, 30)
    second = processor.process(photos, 30)

    assert first.succeeded == second.succeeded
    assert first.failed == second.failed
    assert first.archive == second.archive


def test_duplicate_identifier_first_wins(processor, face_photo):
    photos = [
        InputPhoto("MTI500 - Foto antiga.png", face_photo),
        InputPhoto("MTI500_nova.png", face_photo),
        InputPhoto("mti500.png", face_photo),
    ]
    result = processor.process(photos, 20)

    assert result.succeeded_identifiers() == ["MTI500"]
    assert [failure.filename for failure in result.failed] == ["MTI500_nova.png", "mti500.png"]
    assert {failure.error_type for failure in result.failed} == {"DuplicateIdentifierError"}
    assert archive_names(result) == ["MTI500.jpg"]


def test_duplicate_after_failed_photo_is_kept(processor, face_photo, faceless_photo):
    photos = [
        InputPhoto("MTI9 - sem rosto.png", faceless_photo),
        InputPhoto("MTI9 - ok.png", face_photo),
    ]
    result = processor.process(photos, 20)

    assert result.succeeded_identifiers() == ["MTI9"]
    assert result.failed[0].filename == "MTI9 - sem rosto.png"


def test_invalid_photo_rejected_before_decoding(processor, face_photo):
    photos = [
        InputPhoto("MTI1.gif", face_photo),
        InputPhoto("MTI2.png", face_photo),
    ]
    result = processor.process(photos, 20)

    assert result.succeeded_identifiers() == ["MTI2"]
    assert result.failed[0].error_type == "InvalidPhotoError"


def test_oversized_photo_rejected(transcoder, face_photo):
    processor = BatchProcessor(transcoder, max_photo_bytes=10)
    result = processor.process([InputPhoto("MTI1.png", face_photo)], 20)

    assert not result.succeeded
    assert result.failed[0].error_type == "InvalidPhotoError"
    assert archive_names(result) == []


def test_undecodable_photo(processor):
    result = processor.process([InputPhoto("MTI1.jpg", b"\x00\x01lixo")], 20)
    assert result.failed[0].error_type == "DecodeError"


def test_unexpected_error_is_reported():
    processor = BatchProcessor(ExplodingTranscoder())
    result = processor.process([InputPhoto("MTI1.jpg", b"x")], 20)

    assert result.failed[0].reason == "falha inesperada"
    assert result.failed[0].error_type == "RuntimeError"


@pytest.mark.parametrize("radius", [4, 101, 0, 20.5, "20", True])
def test_invalid_radius(processor, face_photo, radius):
    with pytest.raises(InvalidRadiusError):
        processor.process([InputPhoto("MTI1.png", face_photo)], radius)


@pytest.mark.parametrize("radius", [5, 100])
def test_radius_limits_accepted(processor, face_photo, radius):
    result = processor.process([InputPhoto("MTI1.png", face_photo)], radius)
    assert result.succeeded_identifiers() == ["MTI1"]


def test_empty_batch(processor):
    result = processor.process([], 20)

    assert result.succeeded == ()
    assert result.failed == ()
    assert archive_names(result) == []


def test_stop_cancels_pending_photos(face_photo):
    class StoppingTranscoder:
        def __init__(self, inner):
            self.inner = inner
            self.processor = None

        def transcode(self, photo, radius_percent):
            self.processor.stop()
            return self.inner.transcode(photo, radius_percent)

    from conftest import BrightRegionDetector
    from cracha.core.transcoder import PhotoTranscoder

    stopping = StoppingTranscoder(PhotoTranscoder(BrightRegionDetector()))
    processor = BatchProcessor(stopping, max_workers=1)
    stopping.processor = processor

    photos = [InputPhoto(f"MTI{i}.png", face_photo) for i in range(1, 4)]
    result = processor.process(photos, 20)

    assert result.succeeded_identifiers() == ["MTI1"]
    assert [failure.error_type for failure in result.failed] == ["BatchCancelledError"] * 2


def test_report_dict(processor, face_photo, faceless_photo):
    result = processor.process(make_batch(face_photo, faceless_photo), 20)
    report = result.to_dict()

    assert report['total_photos'] == 5
    assert report['total_succeeded'] == 4
    assert report['total_failed'] == 1
    assert report['failed'][0]['filename'] == "Employee_67890.jpeg"
    assert 'archive' not in report


def test_archive_folder_prefix(transcoder, face_photo):
    processor = BatchProcessor(transcoder, archive_factory=lambda: ZipArchiveWriter(folder="processed_images"))
    result = processor.process([InputPhoto("MTI1.png", face_photo)], 20)

    assert archive_names(result) == ["processed_images/MTI1.jpg"]
    assert result.succeeded[0].filename == "MTI1.jpg"


@pytest.mark.parametrize("filename,stem", [
    ("..\\..\\Windows\\evil.png", "evil"),
    ("C:\\fotos\\MTI42 - Ana.png", "MTI42 - Ana"),
    ("../../etc/MTI7.jpg", "MTI7"),
    ("pasta\\sub/MTI8.tar.png", "MTI8.tar"),
])
def test_stem_ignores_both_path_separators(filename, stem):
    assert InputPhoto(filename, b"").stem == stem


def test_extension_ignores_dots_in_directories():
    assert InputPhoto("fotos.png\\MTI1", b"").extension == ""


def test_windows_paths_stay_inside_archive(processor, face_photo):
    photos = [
        InputPhoto("..\\..\\Windows\\evil.png", face_photo),
        InputPhoto("C:\\fotos\\MTI42 - Ana.png", face_photo),
    ]
    result = processor.process(photos, 20)

    names = archive_names(result)
    assert names == ["MTI42.jpg", "evil.jpg"]
    for name in names:
        assert "\\" not in name
        assert ".." not in name
    assert result.succeeded[0].original_filename == "..\\..\\Windows\\evil.png"


def test_stop_before_process_does_not_cancel_next_batch(processor, face_photo):
    processor.stop()
    result = processor.process([InputPhoto("MTI1.png", face_photo)], 20)

    assert result.succeeded_identifiers() == ["MTI1"]
    assert result.failed == ()


def test_stop_event_cancels_only_its_batch(face_photo):
    from threading import Event
    from conftest import BrightRegionDetector
    from cracha.core.transcoder import PhotoTranscoder

    class SignallingTranscoder:
        def __init__(self, inner):
            self.inner = inner
            self.event = None

        def transcode(self, photo, radius_percent):
            if self.event is not None:
                self.event.set()
            return self.inner.transcode(photo, radius_percent)

    signalling = SignallingTranscoder(PhotoTranscoder(BrightRegionDetector()))
    processor = BatchProcessor(signalling, max_workers=1)

    cancelled = Event()
    signalling.event = cancelled
    photos = [InputPhoto(f"MTI{i}.png", face_photo) for i in range(1, 4)]
    first = processor.process(photos, 20, stop_event=cancelled)

    assert first.succeeded_identifiers() == ["MTI1"]
    assert [failure.error_type for failure in first.failed] == ["BatchCancelledError"] * 2

    # o Event do lote anterior continua sinalizado, mas não afeta o próximo
    signalling.event = None
    second = processor.process(photos, 20)
    assert second.succeeded_identifiers() == ["MTI1", "MTI2", "MTI3"]


def test_stop_reaches_every_active_batch(face_photo):
    from threading import Barrier, Thread
    from conftest import BrightRegionDetector
    from cracha.core.transcoder import PhotoTranscoder

    barrier = Barrier(3, timeout=10)

    class WaitingTranscoder:
        def __init__(self, inner):
            self.inner = inner

        def transcode(self, photo, radius_percent):
            if photo.stem.endswith("_1"):
                # os dois lotes chegam aqui; a thread principal chama stop()
                barrier.wait()
                barrier.wait()
            return self.inner.transcode(photo, radius_percent)

    processor = BatchProcessor(WaitingTranscoder(PhotoTranscoder(BrightRegionDetector())), max_workers=1)
    results = {}

    def run(prefix):
        photos = [InputPhoto(f"MTI{prefix}{i}_{i}.png", face_photo) for i in range(1, 4)]
        results[prefix] = processor.process(photos, 20)

    threads = [Thread(target=run, args=(prefix,)) for prefix in ("10", "20")]
    for thread in threads:
        thread.start()
    barrier.wait()
    processor.stop()
    barrier.wait()
    for thread in threads:
        thread.join(timeout=30)

    for prefix in ("10", "20"):
        result = results[prefix]
        assert result.succeeded_identifiers() == [f"MTI{prefix}1"]
        assert [failure.error_type for failure in result.failed] == ["BatchCancelledError"] * 2
