"""Generate KMZ files from resolved map points."""

from __future__ import annotations

import html
import io
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence
from zipfile import ZIP_DEFLATED, ZipFile

from ..core import ResolvedPoint
from .popup import popup_rows


@dataclass(slots=True)
class KmzExporter:
    """Create KMZ archives with one placemark per point."""

    schema_id: str = "sheet_map_schema"

    def export(self, points: Sequence[ResolvedPoint], labels: Sequence[str], output_path: Path | str) -> Path:
        output_path = Path(output_path)
        output_path.write_bytes(self.to_bytes(points, labels))
        return output_path

    def to_bytes(self, points: Sequence[ResolvedPoint], labels: Sequence[str]) -> bytes:
        """Return the KMZ archive as bytes."""

        kml_content = ET.tostring(self.build_kml(points, labels), encoding="utf-8", xml_declaration=True)
        buffer = io.BytesIO()
        with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
            archive.writestr("doc.kml", kml_content)
        return buffer.getvalue()

    def build_kml(self, points: Sequence[ResolvedPoint], labels: Sequence[str]) -> ET.Element:
        kml = ET.Element("kml", xmlns="http://www.opengis.net/kml/2.2")
        document = ET.SubElement(kml, "Document")
        schema = ET.SubElement(document, "Schema", id=self.schema_id, name="SheetMap")
        for label in labels:
            ET.SubElement(schema, "SimpleField", type="string", name=label)

        for point in points:
            lines = popup_rows(point.source_row, labels)

            placemark = ET.SubElement(document, "Placemark")
            ET.SubElement(placemark, "name").text = (lines[0].text if lines else "") or "Unnamed"
            ET.SubElement(placemark, "description").text = self._description(lines)

            extended_data = ET.SubElement(placemark, "ExtendedData")
            schema_data = ET.SubElement(extended_data, "SchemaData", schemaUrl=f"#{self.schema_id}")
            for line in lines:
                ET.SubElement(schema_data, "SimpleData", name=line.label).text = line.text

            coordinates = ET.SubElement(ET.SubElement(placemark, "Point"), "coordinates")
            coordinates.text = f"{point.lon},{point.lat},0"

        return kml

    @staticmethod
    def _description(lines) -> str:
        if not lines:
            return ""
        buffer = io.StringIO()
        buffer.write('<table border="1" cellpadding="2" cellspacing="0">')
        for line in lines:
            buffer.write("<tr><th>")
            buffer.write(html.escape(line.label))
            buffer.write("</th><td>")
            if line.is_link:
                buffer.write(f'<a href="{html.escape(line.text)}">{line.display_text}</a>')
            else:
                buffer.write(html.escape(line.text))
            buffer.write("</td></tr>")
        buffer.write("</table>")
        return buffer.getvalue()
