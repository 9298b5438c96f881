#!/usr/bin/env python3
"""
Command-line interface for GitLab Clone All.
"""

import sys
import logging
import click
from .cloner import GitLabCloner
from .config import Config, CloneSettings
from .exceptions import GitLabCloneError


@click.command()
@click.option('--url', 'gitlab_url', envvar='GITLAB_URL', help='GitLab base URL (e.g., https://gitlab.company.com)')
@click.option('--api-token', envvar='GITLAB_TOKEN', help='GitLab API access token (sent as PRIVATE-TOKEN)')
@click.option('--directory', '-d', help='Local destination directory for cloned repositories')
@click.option('--clone-method', type=click.Choice(['https', 'ssh'], case_sensitive=False),
              help='Transport used to clone repositories [default: https]')
@click.option('--ssh-key', help='Private key used with --clone-method ssh [default: ~/.ssh/id_rsa_gitlab]')
@click.option('--concurrency', type=click.IntRange(min=1), help='Number of repositories cloned at once')
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), help='Configuration file to read defaults from')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Quiet mode - show only failures and the summary')
def main(gitlab_url: str, api_token: str, directory: str, clone_method: str, ssh_key: str,
         concurrency: int, config_file: str, verbose: bool, quiet: bool):
    """
    Clone every Git repository visible to the account on a GitLab instance.

    Repositories are placed under DIRECTORY following their namespace,
    e.g. DIRECTORY/group/subgroup/repo. Repositories that already exist
    locally are left untouched.
    """
    config = Config(config_file)

    try:
        settings = CloneSettings.resolve(
            config,
            gitlab_url=gitlab_url,
            access_token=api_token,
            destination=directory,
            clone_method=clone_method,
            ssh_key=ssh_key,
            concurrent_clones=concurrency,
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    cloner = GitLabCloner(settings, quiet=quiet)
    if verbose:
        logging.getLogger('gitlab_clone_all').setLevel(logging.DEBUG)

    try:
        summary = cloner.clone_all()
        sys.exit(0 if summary.success else 1)
    except KeyboardInterrupt:
        cloner.logger.info("Operation cancelled by user")
        sys.exit(1)
    except GitLabCloneError as e:
        cloner.logger.error(f"Clone run failed: {e}")
        sys.exit(1)
    except Exception as e:
        cloner.logger.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
