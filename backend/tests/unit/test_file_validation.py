"""Unit tests for upload validation utilities"""

import pytest
from resumeflow.domain.documents import (
    is_supported_mime_type,
    resolve_mime_type,
    validate_file_size,
    validate_filename,
    validate_upload,
    sanitize_filename,
    ValidationError,
    ValidationErrorCode,
    SUPPORTED_MIME_TYPES,
    MAX_FILE_SIZE,
)

PDF = 'application/pdf'
DOC = 'application/msword'
DOCX = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'


class TestMimeTypeValidation:
    """Test MIME type validation for uploads"""

    def test_supported_mime_types_constant(self):
        """Test SUPPORTED_MIME_TYPES is exactly pdf, doc and docx"""
        assert SUPPORTED_MIME_TYPES == {PDF, DOC, DOCX}

    @pytest.mark.parametrize("mime_type", [PDF, DOC, DOCX])
    def test_resume_types_supported(self, mime_type):
        assert is_supported_mime_type(mime_type) is True

    def test_unsupported_mime_types(self):
        """Test images, executables and spreadsheets are rejected"""
        assert is_supported_mime_type('image/png') is False
        assert is_supported_mime_type('application/x-msdownload') is False
        assert is_supported_mime_type('text/csv') is False
        assert is_supported_mime_type(None) is False


class TestMimeTypeResolution:
    """Test the extension fallback for generic content types"""

    def test_declared_type_wins(self):
        assert resolve_mime_type('resume.docx', PDF) == PDF

    def test_declared_type_parameters_stripped(self):
        assert resolve_mime_type('resume.pdf', 'Application/PDF; charset=binary') == PDF

    @pytest.mark.parametrize("declared", [None, '', 'application/octet-stream'])
    def test_generic_type_resolved_from_extension(self, declared):
        assert resolve_mime_type('resume.docx', declared) == DOCX
        assert resolve_mime_type('RESUME.DOC', declared) == DOC

    def test_unknown_extension_stays_generic(self):
        assert resolve_mime_type('resume.unknownext', None) == 'application/octet-stream'


class TestFileSizeValidation:
    """Test file size validation"""

    def test_max_file_size_is_5_mib(self):
        assert MAX_FILE_SIZE == 5_242_880

    def test_size_at_limit_accepted(self):
        validate_file_size(MAX_FILE_SIZE)

    def test_size_over_limit_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_file_size(MAX_FILE_SIZE + 1)

        assert exc_info.value.code == ValidationErrorCode.TOO_LARGE
        assert exc_info.value.max_size_bytes == MAX_FILE_SIZE

    def test_custom_limit(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_file_size(101, max_size=100)
        assert exc_info.value.max_size_bytes == 100

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_file_size(0)
        assert exc_info.value.code == ValidationErrorCode.EMPTY_FILE


class TestFilenameValidation:
    """Test filename validation"""

    def test_valid_filename(self):
        validate_filename('resume.pdf')
        validate_filename('../uploads/resume.pdf')

    @pytest.mark.parametrize("filename", [None, '', '   '])
    def test_empty_filename_rejected(self, filename):
        with pytest.raises(ValidationError) as exc_info:
            validate_filename(filename)
        assert exc_info.value.code == ValidationErrorCode.INVALID_FILENAME

    def test_long_filename_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_filename('a' * 252 + '.pdf')
        assert exc_info.value.code == ValidationErrorCode.INVALID_FILENAME

    def test_control_characters_rejected(self):
        with pytest.raises(ValidationError):
            validate_filename('resume\x00.pdf')


class TestFilenameSanitization:
    """Test filename sanitization"""

    def test_path_components_stripped(self):
        assert sanitize_filename('../../resume.pdf') == 'resume.pdf'
        assert sanitize_filename('C:\\Users\\jane\\resume.pdf') == 'resume.pdf'

    def test_unsafe_characters_replaced(self):
        assert sanitize_filename('my resume (final).pdf') == 'my_resume_final_.pdf'

    def test_hidden_file_prefix_removed(self):
        assert sanitize_filename('.resume.pdf') == 'resume.pdf'

    def test_nothing_left_falls_back(self):
        assert sanitize_filename('...') == 'document'


class TestValidateUpload:
    """Test the combined gateway check order"""

    def test_accepts_pdf(self):
        assert validate_upload('resume.pdf', PDF, 200 * 1024) == PDF

    def test_returns_resolved_type(self):
        assert validate_upload('resume.docx', 'application/octet-stream', 1024) == DOCX

    def test_executable_rejected_as_unsupported(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload('resume.exe', 'application/x-msdownload', 1024)
        assert exc_info.value.code == ValidationErrorCode.UNSUPPORTED_TYPE

    def test_large_docx_rejected_as_too_large(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload('resume.docx', DOCX, 6 * 1024 * 1024)
        assert exc_info.value.code == ValidationErrorCode.TOO_LARGE

    def test_type_checked_before_size(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload('resume.exe', 'application/x-msdownload', 6 * 1024 * 1024)
        assert exc_info.value.code == ValidationErrorCode.UNSUPPORTED_TYPE

    def test_filename_checked_first(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload('', 'application/x-msdownload', 0)
        assert exc_info.value.code == ValidationErrorCode.INVALID_FILENAME
