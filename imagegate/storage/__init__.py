"""Local file storage for images."""