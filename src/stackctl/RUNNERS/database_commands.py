# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Invocations for working with the primary data store inside its container.

Credentials never appear on a command line: they are handed to the runtime
through the child's environment, exported into the container by name, and
dereferenced there by a fixed shell wrapper.
"""
import logging
from typing import Sequence

from jinja2 import Template
from pydantic import BaseModel, SecretStr

from ..exceptions import CredentialsUnavailable
from ..MODELS.environment import Environment
from ..MODELS.invocation import Invocation, Verb
from ..MODELS.project_config import DatabaseConfig
from ..PARSERS.env_parser import EnvParser

logger = logging.getLogger(__name__)

# "$@" forwards the tool arguments untouched
AUTH_WRAPPER_TEMPLATE = Template(
    'exec {{ tool }} -u "${{ username_key }}" -p "${{ password_key }}" "$@"'
)

DROP_DATABASE_TEMPLATE = Template(
    "db.getSiblingDB({{ database | tojson }}).dropDatabase()"
)


class DatabaseCredentials(BaseModel):
    """
    Root credentials and database name read from the env file.
    """
    username: str
    password: SecretStr
    database: str


def read_credentials(env_file: str, db: DatabaseConfig) -> DatabaseCredentials:
    """
    Reads database credentials from an env file.

    :param env_file: Path to the env file.
    :param db: Which keys hold the credentials.
    :raises CredentialsUnavailable: If the file or any key is missing or empty.
    """
    try:
        values = EnvParser.parse(env_file)
    except FileNotFoundError:
        raise CredentialsUnavailable(f"Env file not found: {env_file}") from None

    keys = {
        "username": db.username_key,
        "password": db.password_key,
        "database": db.database_key,
    }
    missing = [key for key in keys.values() if not values.get(key)]
    if missing:
        raise CredentialsUnavailable(
            f"Missing or empty in {env_file}: {', '.join(missing)}"
        )
    return DatabaseCredentials(**{field: values[key] for field, key in keys.items()})


def _authenticated(environment: Environment, db: DatabaseConfig, creds: DatabaseCredentials,
                   tool: str, tool_args: Sequence[str], interactive: bool) -> Invocation:
    wrapper = AUTH_WRAPPER_TEMPLATE.render(
        tool=tool,
        username_key=db.username_key,
        password_key=db.password_key,
    )
    return Invocation(
        verb=Verb.EXEC,
        environment=environment,
        service=db.service,
        extra_args=("sh", "-c", wrapper, tool) + tuple(tool_args),
        child_env={db.username_key: creds.username, db.password_key: creds.password.get_secret_value()},
        interactive=interactive,
    )


def db_shell(environment: Environment, db: DatabaseConfig, creds: DatabaseCredentials,
             extra_args: Sequence[str] = ()) -> Invocation:
    """
    Interactive database shell in the database service.
    """
    return _authenticated(environment, db, creds, db.shell, extra_args, interactive=True)


def reset_data(environment: Environment, db: DatabaseConfig, creds: DatabaseCredentials) -> Invocation:
    """
    Drops the configured database.
    """
    script = DROP_DATABASE_TEMPLATE.render(database=creds.database)
    logger.debug("Reset script: %s", script)
    return _authenticated(environment, db, creds, db.shell, ["--eval", script], interactive=False)


def backup_dump(environment: Environment, db: DatabaseConfig, creds: DatabaseCredentials) -> Invocation:
    """
    Dumps every database as a single archive on stdout.
    """
    return _authenticated(environment, db, creds, db.dump, ["--archive"], interactive=False)
