import logging
import re
from typing import Dict, Optional

from flask.logging import default_handler

from .config import Config

VARIABLE_PATTERN = re.compile(r"{{\s*([\w\d_]+)\s*}}")


class VariableHandler:
    """Handles variable replacements in prompt templates"""

    def __init__(self, config: Config):
        self.config = config

        self.logger = logging.getLogger("app.variables")
        self.logger.addHandler(default_handler)
        self.logger.setLevel(self.config.get("loglevel", default=logging.INFO))

    def coalesce_data(self, data: Dict[str, str]):
        """Joins data values into one data["input"]"""
        if len(data) == 1 and list(data.keys())[0] == "input":
            return data["input"]

        if "input" not in data:
            data["input"] = ""

        for source in list(data.keys()):
            if source == "input":
                continue

            if len(data["input"]) == 0:
                data["input"] = data[source]
            else:
                data["input"] += "\n\n" + data[source]
            del data[source]

        return data["input"]

    def insert_data_into_template(self, template: str, data: Dict[str, str]) -> str:
        """
        Replace {{  }} expressions in template from data[].
        Replaced keys are deleted from data.
        """

        def replace_match(match):
            key = match.group(1)
            if key in data:
                self.logger.debug("Input data inserted: %s", key)
                return data.pop(key)
            return match.group(0)

        return VARIABLE_PATTERN.sub(replace_match, template)

    def resolve(
        self,
        template: str,
        variables: Dict[str, str],
        data: Optional[Dict[str, str]] = None,
        coalesce_data: bool = False,
    ):
        """
        Replace variables in template (text)
        If <var_name> exists in variables, replace, otherwise leave {{ var_name }} in template
        Whatever is left in data after insertion is appended when coalesce_data is set
        """
        self.logger.debug("Variables replaced: %s", list(variables.keys()))
        template = VARIABLE_PATTERN.sub(
            lambda match: str(variables.get(match.group(1), match.group(0))),
            template,
        )

        if data is None:
            return template

        template = self.insert_data_into_template(template, data)

        if coalesce_data and len(data):
            return (
                template + "\n\n" + self.coalesce_data(data)
                if len(template)
                else self.coalesce_data(data)
            )

        return template
