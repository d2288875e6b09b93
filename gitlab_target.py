#!/usr/bin/env python3
"""GitLab API wrapper for creating projects and building push addresses."""

from __future__ import annotations

import sys
from typing import Optional, Tuple

import gitlab
import requests

from config import GitLabConfig, PushMethod
from logging_utils import Logger

# Exit codes
EXIT_EXECUTION_ERROR = 1

ALREADY_TAKEN = "has already been taken"


class GitLabTarget:
    """Creates private projects for a GitLab user."""

    def __init__(
        self, config: GitLabConfig, push_method: PushMethod = PushMethod.SSH
    ) -> None:
        self.config = config
        self.push_method = push_method
        self.api: Optional[gitlab.Gitlab] = None
        self.namespace_id: Optional[int] = None

    @property
    def domain(self) -> str:
        """Destination URL without protocol and trailing slash."""
        return self.config.url.split("//", 1)[-1].rstrip("/")

    @property
    def projects_endpoint(self) -> str:
        return f"{self.config.url.rstrip('/')}/api/v4/projects"

    def connect(self) -> None:
        Logger.info(f"init gitlab API: {self.config.url}")
        try:
            self.api = gitlab.Gitlab(
                url=self.config.url, private_token=self.config.token
            )
            self.api.auth()
            current = getattr(self.api.user, "username", None)
            Logger.debug(f"gitlab token owner: {current}")
            if current != self.config.username:
                # Token of another account (e.g. an admin): target the user's namespace
                namespace = self.api.namespaces.get(self.config.username)
                self.namespace_id = namespace.id
                Logger.info(
                    f"creating projects in namespace '{self.config.username}' "
                    f"(id {self.namespace_id})"
                )
        except gitlab.exceptions.GitlabAuthenticationError as e:
            Logger.error(f"authentication error (gitlab): {e}")
            sys.exit(EXIT_EXECUTION_ERROR)
        except gitlab.exceptions.GitlabGetError as e:
            Logger.error(
                f"gitlab namespace '{self.config.username}' not accessible: {e}"
            )
            sys.exit(EXIT_EXECUTION_ERROR)
        except Exception as e:
            Logger.error(f"failed to initialize gitlab API: {e}")
            sys.exit(EXIT_EXECUTION_ERROR)

    def create_project(self, name: str) -> bool:
        """Create a private project; False when it already exists."""
        data = {"name": name, "path": name, "visibility": "private"}
        if self.namespace_id is not None:
            data["namespace_id"] = self.namespace_id

        try:
            response = requests.post(
                self.projects_endpoint,
                headers={"PRIVATE-TOKEN": self.config.token},
                data=data,
                timeout=30,
            )
        except requests.RequestException as e:
            Logger.error(f"failed to contact gitlab api: {e}")
            sys.exit(EXIT_EXECUTION_ERROR)

        if response.status_code == 201:
            return True
        if ALREADY_TAKEN in response.text:
            return False

        Logger.error(
            f"failed to create project '{name}' ({response.status_code}): "
            f"{response.text.strip()}"
        )
        sys.exit(EXIT_EXECUTION_ERROR)

    def push_url(self, name: str) -> str:
        """Get the git remote of a project based on push method."""
        if self.push_method == PushMethod.HTTPS:
            return f"{self.config.url.rstrip('/')}/{self.config.username}/{name}.git"
        return f"git@{self.domain}:{self.config.username}/{name}.git"

    def push_credentials(self) -> Optional[Tuple[str, str]]:
        if self.push_method == PushMethod.HTTPS:
            return self.config.username, self.config.token
        return None
