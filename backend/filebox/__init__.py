"""Filebox: file upload, listing, download and delete over HTTP."""
