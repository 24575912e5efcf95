import zipfile
from datetime import datetime


class _ChunkSink:
    """
    Write-only file object for ZipFile. It has no tell()/seek(), so
    ZipFile writes data descriptors instead of seeking back, and the
    bytes written so far can be drained at any point.
    """

    def __init__(self):
        self._buffer = bytearray()

    def write(self, data):
        self._buffer.extend(data)
        return len(data)

    def flush(self):
        pass

    def drain(self):
        chunk = bytes(self._buffer)
        self._buffer.clear()
        return chunk


class ZipStreamWriter:
    """
    Builds a ZIP archive entry by entry, handing back the compressed
    bytes produced by each append so the caller can send them on
    """

    def __init__(self, compresslevel=9):
        self._sink = _ChunkSink()
        self.compresslevel = compresslevel
        self._zip = zipfile.ZipFile(self._sink, mode='w',
                                    compression=zipfile.ZIP_DEFLATED,
                                    compresslevel=compresslevel)
        self.names = set()
        self.closed = False

    def append(self, name, data):
        """Write one entry; returns the bytes to send"""
        if self.closed:
            raise ValueError("Archive already finalized")
        if name in self.names:
            raise ValueError(f"Duplicate archive entry: {name}")

        info = zipfile.ZipInfo(name, date_time=datetime.now().timetuple()[:6])
        info.compress_type = zipfile.ZIP_DEFLATED
        info.external_attr = 0o644 << 16
        self._zip.writestr(info, data, compresslevel=self.compresslevel)
        self.names.add(name)
        return self._sink.drain()

    def finalize(self):
        """Write the central directory; returns the closing bytes"""
        if self.closed:
            return b''
        self._zip.close()
        self.closed = True
        return self._sink.drain()
