"""
Kubectl command runner

All cluster access goes through this wrapper: prerequisite probes, applying
the operator bundle and manifests, best-effort waits, status reads and
deletion. Nothing is parsed beyond single jsonpath values.
"""

import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Union

from lib.errors import KubectlError
from utils.console import Colors


DEFAULT_TIMEOUT = 120


class Kubectl:
    """Runs kubectl subcommands against the current cluster context"""

    def __init__(self, binary: str = "kubectl", debug: bool = False,
                 timeout: int = DEFAULT_TIMEOUT):
        """
        Initialize runner.

        Args:
            binary: kubectl executable name or path
            debug: Echo every command before running it
            timeout: Default per-command timeout in seconds
        """
        self.binary = binary
        self.debug = debug
        self.timeout = timeout

    def run(self, args: List[str], check: bool = True, input: Optional[str] = None,
            timeout: Optional[int] = None) -> subprocess.CompletedProcess:
        """
        Run kubectl with the given arguments and capture its output.

        Args:
            args: kubectl arguments (without the binary)
            check: Raise KubectlError on non-zero exit
            input: Text passed on stdin
            timeout: Override of the default timeout

        Returns:
            CompletedProcess with text stdout/stderr

        Raises:
            KubectlError: Command failed (with check), timed out or binary missing
        """
        cmd = [self.binary] + [str(a) for a in args]
        if self.debug:
            print(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                input=input,
                capture_output=True,
                text=True,
                timeout=timeout or self.timeout
            )
        except subprocess.TimeoutExpired:
            raise KubectlError(cmd, reason=f"timed out after {timeout or self.timeout}s")
        except FileNotFoundError:
            raise KubectlError(cmd, reason=f"'{self.binary}' command not found")

        if check and result.returncode != 0:
            raise KubectlError(cmd, result.returncode, result.stderr)

        return result

    def _echo(self, result: subprocess.CompletedProcess):
        if result.stdout:
            print(result.stdout.rstrip())

    def available(self) -> bool:
        """Check whether the kubectl binary is on PATH"""
        return shutil.which(self.binary) is not None

    def succeeds(self, args: List[str], timeout: Optional[int] = None) -> bool:
        """Run a probe command and report whether it exited 0"""
        try:
            return self.run(args, check=False, timeout=timeout).returncode == 0
        except KubectlError as e:
            if self.debug:
                print(f"Probe failed: {e}", file=sys.stderr)
            return False

    def cluster_reachable(self) -> bool:
        return self.succeeds(['cluster-info'], timeout=30)

    def resource_exists(self, kind: str, name: str, namespace: str) -> bool:
        return self.succeeds(['get', kind, name, '-n', namespace])

    def apply_file(self, source: Union[str, Path]) -> subprocess.CompletedProcess:
        """Apply a local manifest file or remote URL"""
        result = self.run(['apply', '-f', str(source)])
        self._echo(result)
        return result

    def apply_manifest(self, manifest: str) -> subprocess.CompletedProcess:
        """Apply manifest text via stdin"""
        result = self.run(['apply', '-f', '-'], input=manifest)
        self._echo(result)
        return result

    def ensure_namespace(self, name: str) -> subprocess.CompletedProcess:
        """
        Create a namespace if it does not exist.

        Renders the namespace client-side and applies it, so re-running is a no-op.
        """
        rendered = self.run(['create', 'namespace', name, '--dry-run=client', '-o', 'yaml'])
        return self.apply_manifest(rendered.stdout)

    def delete_file(self, source: Union[str, Path],
                    ignore_not_found: bool = True) -> subprocess.CompletedProcess:
        args = ['delete', '-f', str(source)]
        if ignore_not_found:
            args.append('--ignore-not-found=true')
        result = self.run(args)
        self._echo(result)
        return result

    def delete_manifest(self, manifest: str,
                        ignore_not_found: bool = True) -> subprocess.CompletedProcess:
        """Delete the resources described by manifest text via stdin"""
        args = ['delete', '-f', '-']
        if ignore_not_found:
            args.append('--ignore-not-found=true')
        result = self.run(args, input=manifest)
        self._echo(result)
        return result

    def delete(self, kind: str, name: str, namespace: Optional[str] = None,
               ignore_not_found: bool = True) -> subprocess.CompletedProcess:
        args = ['delete', kind, name]
        if namespace:
            args += ['-n', namespace]
        if ignore_not_found:
            args.append('--ignore-not-found=true')
        result = self.run(args)
        self._echo(result)
        return result

    def delete_namespace(self, name: str) -> subprocess.CompletedProcess:
        return self.delete('namespace', name)

    def wait(self, resource: str, condition: str, namespace: str, timeout: str) -> bool:
        """
        Wait for a condition on a resource, best effort.

        Args:
            resource: kind/name, e.g. deployment/k6-operator-controller-manager
            condition: Value for --for, e.g. condition=available
            namespace: Namespace of the resource
            timeout: kubectl duration string, e.g. 300s

        Returns:
            True if the condition was met, False on any failure
        """
        args = ['wait', f'--for={condition}', f'--timeout={timeout}', resource, '-n', namespace]
        # kubectl enforces its own --timeout; leave headroom before killing it
        limit = duration_seconds(timeout) + 30
        try:
            result = self.run(args, check=False, timeout=limit)
        except KubectlError as e:
            Colors.warning(f"Wait for {resource} failed: {e}")
            return False

        if result.returncode != 0:
            Colors.warning(f"Wait for {resource} failed: {result.stderr.strip()[:200]}")
            return False
        self._echo(result)
        return True

    def get_jsonpath(self, kind: str, name: str, namespace: str, jsonpath: str) -> str:
        """
        Read a single field of a resource.

        Returns:
            The stripped value, or "" if the resource or field cannot be read
        """
        try:
            result = self.run(['get', kind, name, '-n', namespace, '-o', f'jsonpath={jsonpath}'],
                              check=False)
        except KubectlError:
            return ""
        if result.returncode != 0:
            return ""
        return result.stdout.strip()


def duration_seconds(duration: str) -> int:
    """Convert a kubectl duration like 300s, 5m or 1h to seconds"""
    units = {'s': 1, 'm': 60, 'h': 3600}
    duration = duration.strip()
    if duration and duration[-1] in units:
        return int(duration[:-1]) * units[duration[-1]]
    return int(duration)
