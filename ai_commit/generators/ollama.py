"""Ollama Generator for Local Models"""

import http.client
import json
import os
import socket
import urllib.error
import urllib.request

from ai_commit.generators.base import Generator, GeneratorError


class OllamaGenerator(Generator):
    """Ollama HTTP API generator. Requires: ollama serve"""

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_TIMEOUT = 300  # CPU inference is slow

    def __init__(self, config: dict, runner=None):
        super().__init__(config, runner)
        self.model = config.get("model") or self.DEFAULT_MODEL
        self.host = os.environ.get("OLLAMA_HOST") or config.get("host") or self.DEFAULT_HOST
        timeout = config.get("timeout") or self.DEFAULT_TIMEOUT
        try:
            self.timeout = int(timeout)
        except (TypeError, ValueError) as e:
            raise GeneratorError(f"Ollama timeout must be a number of seconds, got {timeout!r}") from e

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def _call_api(self, prompt: str) -> dict:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "keep_alive": "10m",
            "options": {"temperature": 0.4},
        }
        data = json.dumps(payload).encode('utf-8')
        req = urllib.request.Request(
            f"{self.host}/api/generate", data=data, headers={"Content-Type": "application/json"}
        )
        with urllib.request.urlopen(req, timeout=self.timeout) as response:
            return json.loads(response.read().decode('utf-8'))

    def generate(self, prompt: str) -> str:
        try:
            result = self._call_api(prompt)
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise GeneratorError(f"Model '{self.model}' not found. Run: ollama pull {self.model}")
            raise GeneratorError(f"Ollama error ({e.code}): {e.reason}")
        except urllib.error.URLError as e:
            if isinstance(e.reason, socket.timeout):
                raise GeneratorError(f"Request timed out after {self.timeout}s. Raise generators.ollama.timeout")
            raise GeneratorError("Ollama not running. Start with: ollama serve")
        except socket.timeout:
            raise GeneratorError(f"Request timed out after {self.timeout}s. Raise generators.ollama.timeout")
        except json.JSONDecodeError:
            raise GeneratorError("Invalid response from Ollama.")
        except (http.client.HTTPException, OSError) as e:
            raise GeneratorError(f"Connection to Ollama lost: {e}")

        return result.get("response", "").strip()
