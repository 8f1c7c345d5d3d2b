# -*- coding: utf-8 -*-
"""Image hosting: uploads go to a GitHub repository, the sheet keeps the URL."""

import base64
import binascii
import logging
import uuid

import requests

from event_portal.errors import NotValid, UpstreamFailure

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
RAW_CONTENT_URL = "https://raw.githubusercontent.com"


def safe_file_part(text):
    return "".join(c if c.isalnum() or c in ['_', '-'] else "_" for c in str(text)).strip("_") or "image"


class GitHubImageHost:

    def __init__(self, token=None, repo=None, branch='main', base_dir='images', timeout=30):
        self.token = token
        self.repo = repo
        self.branch = branch
        self.base_dir = base_dir.strip('/')
        self.timeout = timeout

    @property
    def configured(self):
        return bool(self.token and self.repo)

    def resolve(self, image, name_hint, folder):
        """Turn a form value into a stored URL.

        Empty -> None, an http(s) link is kept as-is, anything else is
        base64 image data (optionally a ``data:`` URL) and gets uploaded.
        """
        if not image:
            return None
        image = str(image).strip()
        if image.startswith(('http://', 'https://')):
            return image
        file_name = f"{safe_file_part(name_hint)}_{uuid.uuid4().hex[:10]}.jpg"
        return self.upload(file_name, image, folder)

    def upload(self, file_name, content, folder):
        if not self.configured:
            raise NotValid("Image uploads are not configured; provide an image URL instead.")
        if content.startswith('data:') and ',' in content:
            content = content.split(',', 1)[1]
        try:
            base64.b64decode(content, validate=True)
        except (binascii.Error, ValueError):
            raise NotValid("Image must be a URL or base64 encoded data.")
        path = f"{self.base_dir}/{folder}/{file_name}"
        url = f"{GITHUB_API_URL}/repos/{self.repo}/contents/{path}"
        headers = {"Authorization": f"token {self.token}", "Accept": "application/vnd.github+json"}
        payload = {"message": f"Upload {file_name}", "content": content, "branch": self.branch}
        try:
            response = requests.put(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.exception(f"Image upload to {self.repo} failed: {e}")
            raise UpstreamFailure("Image upload failed.") from e
        if response.status_code not in (200, 201):
            logger.error(f"Image upload to {self.repo} returned {response.status_code}: {response.text[:200]}")
            raise UpstreamFailure("Image upload failed.")
        logger.info(f"Uploaded image {path}")
        return f"{RAW_CONTENT_URL}/{self.repo}/{self.branch}/{path}"
