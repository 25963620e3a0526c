"""Document writer for saving exported collider documents.

This module provides the DocumentWriter class for writing an
ExportDocument as JSON next to its source scene.
"""

from pathlib import Path

from collidify.domain import ExportDocument
from collidify.exceptions import DocumentSaveError

OUTPUT_SUFFIX = ".colliders.json"


class DocumentWriter:
    """Writes exported documents to disk.

    Example:
        writer = DocumentWriter(document, DocumentWriter.get_output_path(scene_path))
        writer.save()
    """

    def __init__(self, document: ExportDocument, output_path: Path, indent: int | None = 2) -> None:
        """Initialize the document writer.

        Args:
            document: The document to write
            output_path: Destination file
            indent: JSON indentation (None for compact output)
        """
        self._document = document
        self._output_path = output_path
        self._indent = indent

    @property
    def output_path(self) -> Path:
        return self._output_path

    def save(self) -> Path:
        """Write the document as UTF-8 JSON.

        Returns:
            The path written

        Raises:
            DocumentSaveError: If the file cannot be written
        """
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            self._output_path.write_text(self._document.to_json(indent=self._indent) + "\n", encoding="utf-8")
        except OSError as e:
            raise DocumentSaveError(str(self._output_path), str(e)) from e
        return self._output_path

    @staticmethod
    def get_output_path(input_path: Path) -> Path:
        """Generate the default output path for a scene file.

        Converts: level.json -> level.colliders.json
                  scenes/world.scene.json -> scenes/world.scene.colliders.json

        Args:
            input_path: Scene file path

        Returns:
            Path with the colliders suffix in place of the extension
        """
        return input_path.parent / f"{input_path.stem}{OUTPUT_SUFFIX}"
