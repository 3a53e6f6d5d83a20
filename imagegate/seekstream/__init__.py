"""Seekable streams over non-seekable sources, with memory and temp-file buffers."""