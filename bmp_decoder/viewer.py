# NOTE: For displaying the decoded image in a GUI,
#       please install PyQt5.
#
# Installation (in terminal):
#   pip install PyQt5
import logging
import os
import sys

from PyQt5.QtWidgets import (
    QApplication, QWidget, QVBoxLayout, QPushButton, QLabel,
    QFileDialog, QTextEdit, QSlider, QHBoxLayout, QCheckBox
)
from PyQt5.QtGui import QPixmap, QImage, qRgb
from PyQt5.QtCore import Qt

from .errors import BMPError
from .parser import BMPParser
from .sink import RGBSink
from .source import ByteSource

logger = logging.getLogger(__name__)


def load_bitmap(filepath):
    """Decode `filepath` into (parser, RGB rows, decode report)."""
    with ByteSource.open(filepath) as source:
        parser = BMPParser(source)
        parser.load()
        sink = RGBSink()
        report = parser.decode(sink)
    return parser, sink.pixels, report


def describe(parser, report):
    meta_text = ""
    for k, v in parser.metadata.items():
        meta_text += f"{k}: {v}\n"
    if parser.color_table is not None:
        meta_text += f"palette entries: {parser.color_table.size}\n"
    meta_text += f"rows decoded: {report.rows_emitted}\n"
    for error in report.row_errors:
        meta_text += f"warning: {error}\n"
    if report.truncated:
        meta_text += "warning: compressed data truncated, missing pixels filled with palette index 0\n"
    return meta_text


class BMPViewer(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("BMP Viewer")
        self.resize(700, 500)

        # Store decoded pixel rows and image size
        self.original_pixels = None
        self.width = 0
        self.height = 0

        # RGB channels toggle and display settings
        self.r_enabled = True
        self.g_enabled = True
        self.b_enabled = True
        self.brightness = 1.0
        self.scale = 1.0

        layout = QVBoxLayout()

        top_layout = QHBoxLayout()

        # Button to open BMP file
        self.open_button = QPushButton("Open BMP File")
        self.open_button.setFixedSize(150, 50)
        self.open_button.clicked.connect(self.open_file)
        top_layout.addWidget(self.open_button)

        top_layout.addStretch()

        # Checkboxes to enable/disable R, G, B channels
        self.r_button = QCheckBox("R")
        self.g_button = QCheckBox("G")
        self.b_button = QCheckBox("B")

        self.r_button.clicked.connect(self.toggle_r)
        self.g_button.clicked.connect(self.toggle_g)
        self.b_button.clicked.connect(self.toggle_b)

        for btn in (self.r_button, self.g_button, self.b_button):
            btn.setChecked(True)
            btn.setFixedSize(30, 30)
            top_layout.addWidget(btn)

        layout.addLayout(top_layout)

        # Label to display the image
        self.image_label = QLabel("No Image Loaded")
        self.image_label.setStyleSheet("border: 1px solid black; background: white;")
        self.image_label.setAlignment(Qt.AlignCenter)
        self.image_label.setFixedSize(700, 400)
        layout.addWidget(self.image_label)

        # Text box to display BMP metadata and decode warnings
        self.metadata_box = QTextEdit("No Metadata Loaded")
        self.metadata_box.setMinimumHeight(150)
        self.metadata_box.setReadOnly(True)
        layout.addWidget(self.metadata_box)

        # Slider for brightness adjustment
        self.brightness_slider = QSlider(Qt.Horizontal)
        self.brightness_slider.setRange(0, 100)
        self.brightness_slider.setValue(100)
        self.brightness_slider.valueChanged.connect(self.update_image)
        layout.addWidget(QLabel("Brightness"))
        layout.addWidget(self.brightness_slider)

        # Slider for scaling the image
        self.scale_slider = QSlider(Qt.Horizontal)
        self.scale_slider.setRange(1, 100)
        self.scale_slider.setValue(100)
        self.scale_slider.valueChanged.connect(self.update_image)
        layout.addWidget(QLabel("Scale"))
        layout.addWidget(self.scale_slider)

        self.setLayout(layout)

    # Open BMP file and decode pixel data
    def open_file(self):
        filepath, _ = QFileDialog.getOpenFileName(self, "Open BMP File", "", "BMP Files (*.bmp)")
        if not filepath:
            return

        try:
            parser, pixels, report = load_bitmap(filepath)
        except (BMPError, OSError) as e:
            logger.error("%s: %s", filepath, e)
            self.metadata_box.setText(f"Cannot open {filepath}:\n{e}")
            return

        self.metadata_box.setText(describe(parser, report))

        self.original_pixels = pixels
        self.width = parser.descriptor.width
        self.height = parser.descriptor.length

        self.update_image()

    # Update image display based on settings
    def update_image(self):
        if not self.original_pixels:
            return

        self.brightness = self.brightness_slider.value() / 100.0
        self.scale = self.scale_slider.value() / 100.0

        new_w = max(1, int(self.width * self.scale))
        new_h = max(1, int(self.height * self.scale))

        image = QImage(new_w, new_h, QImage.Format_RGB32)

        # Loop through each pixel and apply brightness and RGB toggle
        for y in range(new_h):
            src_y = min(int(y / self.scale), self.height - 1)
            row = self.original_pixels[src_y]
            for x in range(new_w):
                src_x = min(int(x / self.scale), self.width - 1)

                R, G, B = row[src_x]

                if not self.r_enabled:
                    R = 0
                if not self.g_enabled:
                    G = 0
                if not self.b_enabled:
                    B = 0

                R = int(R * self.brightness)
                G = int(G * self.brightness)
                B = int(B * self.brightness)

                image.setPixel(x, y, qRgb(R, G, B))

        # Show updated image
        pixmap = QPixmap.fromImage(image)
        self.image_label.setPixmap(pixmap)

    # Toggle R channel
    def toggle_r(self):
        self.r_enabled = self.r_button.isChecked()
        self.update_image()

    # Toggle G channel
    def toggle_g(self):
        self.g_enabled = self.g_button.isChecked()
        self.update_image()

    # Toggle B channel
    def toggle_b(self):
        self.b_enabled = self.b_button.isChecked()
        self.update_image()


def main():
    logging.basicConfig(
        level=os.environ.get("BMP_VIEWER_LOG_LEVEL", "WARNING").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    viewer = BMPViewer()
    viewer.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
