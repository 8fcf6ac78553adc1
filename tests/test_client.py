import logging

import pytest

from fakes import api_error, key, org, repo, team
from gitea_provider.adapters.gitea import GiteaClient
from gitea_provider.adapters.gitea.api_types import (
    Commit,
    CreateKeyOption,
    CreatePullRequestOption,
    CreateRepoOption,
    EditRepoOption,
    MergePullRequestOption,
    PullRequest,
    User,
)
from gitea_provider.domain.entities import RepositoryPermission
from gitea_provider.domain.errors import (
    DestructiveCallDisallowedError,
    InvalidServerDataError,
    NotFoundError,
    PageLimitExceededError,
    ProviderRequestError,
)


class TestOrganizations:
    def test_get_org_returns_validated_object(self, client, transport):
        transport.results["get_org"] = org("acme")

        assert client.get_org("acme").username == "acme"
        assert transport.calls == [("get_org", ("acme",))]

    def test_get_org_404_is_not_found(self, client, transport):
        transport.failures["get_org"] = api_error(404, "org does not exist")

        with pytest.raises(NotFoundError):
            client.get_org("ghost")

    def test_get_org_rejects_invalid_object(self, client, transport):
        transport.results["get_org"] = org("")

        with pytest.raises(InvalidServerDataError):
            client.get_org("acme")

    def test_list_orgs_concatenates_all_pages(self, client, transport):
        transport.pages["list_my_orgs"] = [[org("a"), org("b")], [org("c")]]

        result = client.list_orgs()

        assert [item.username for item in result] == ["a", "b", "c"]
        assert [args[-1] for _, args in transport.calls] == [1, 2, 3]

    def test_one_invalid_org_fails_the_whole_list(self, client, transport):
        transport.pages["list_my_orgs"] = [[org("a"), org("")], [org("c")]]

        with pytest.raises(InvalidServerDataError):
            client.list_orgs()

    def test_null_element_fails_the_whole_list(self, client, transport):
        transport.pages["list_my_orgs"] = [[org("a"), None]]

        with pytest.raises(InvalidServerDataError, match="empty"):
            client.list_orgs()

    def test_page_of_only_null_elements_does_not_end_pagination(self, client, transport):
        transport.pages["list_my_orgs"] = [[None], [org("b")]]

        with pytest.raises(InvalidServerDataError):
            client.list_orgs()

        assert [args[-1] for _, args in transport.calls] == [1, 2, 3]

    def test_null_object_is_invalid_data(self, client, transport):
        transport.results["get_org"] = None

        with pytest.raises(InvalidServerDataError):
            client.get_org("acme")

    def test_list_orgs_error_mid_way_discards_results(self, client, transport):
        transport.pages["list_my_orgs"] = [[org("a")], [org("b")], [org("c")]]
        transport.page_failures[("list_my_orgs", 2)] = api_error(502, "bad gateway")

        with pytest.raises(ProviderRequestError, match="bad gateway"):
            client.list_orgs()

        assert len(transport.calls) == 2

    def test_max_pages_guard(self, transport):
        transport.pages["list_my_orgs"] = [[org("a")], [org("b")], [org("c")]]
        client = GiteaClient(transport, max_pages=2)

        with pytest.raises(PageLimitExceededError):
            client.list_orgs()

    def test_max_pages_exactly_filled(self, transport):
        transport.pages["list_my_orgs"] = [[org("a")], [org("b")]]
        client = GiteaClient(transport, max_pages=2)

        assert [item.username for item in client.list_orgs()] == ["a", "b"]


class TestTeams:
    def test_list_org_teams_is_paginated(self, client, transport):
        transport.pages["list_org_teams"] = [[team("A", 1)], [team("B", 2)]]

        assert [item.name for item in client.list_org_teams("acme")] == ["A", "B"]

    def test_team_members_by_name(self, client, transport):
        transport.pages["list_org_teams"] = [[team("A", 1), team("B", 2)]]
        transport.pages["list_team_members"] = [[User(id=5, login="alice")], [User(id=6, login="bob")]]

        members = client.list_org_team_members("acme", "B")

        assert [user.login for user in members] == ["alice", "bob"]
        assert ("list_team_members", (2, 1)) in transport.calls

    def test_unknown_team_is_not_found(self, client, transport):
        transport.pages["list_org_teams"] = [[team("A", 1), team("B", 2)]]

        with pytest.raises(NotFoundError):
            client.list_org_team_members("acme", "C")

        assert "list_team_members" not in transport.call_names()

    def test_team_lookup_in_org_without_teams(self, client, transport):
        with pytest.raises(NotFoundError):
            client.list_org_team_members("acme", "C")

    def test_team_members_by_id(self, client, transport):
        transport.pages["list_team_members"] = [[User(id=5, login="alice")]]

        assert [user.login for user in client.list_team_members(7)] == ["alice"]
        assert transport.calls == [("list_team_members", (7, 1)), ("list_team_members", (7, 2))]

    def test_null_team_is_invalid_data(self, client, transport):
        transport.pages["list_org_teams"] = [[team("A", 1), None]]

        with pytest.raises(InvalidServerDataError):
            client.list_org_teams("acme")

    def test_team_members_404_is_not_found(self, client, transport):
        transport.pages["list_org_teams"] = [[team("A", 1)]]
        transport.failures["list_team_members"] = api_error(404)

        with pytest.raises(NotFoundError):
            client.list_org_team_members("acme", "A")


class TestRepositories:
    def test_get_repo(self, client, transport):
        transport.results["get_repo"] = repo("acme/app")

        assert client.get_repo("acme", "app").full_name == "acme/app"

    def test_get_repo_rejects_missing_owner(self, client, transport):
        transport.results["get_repo"] = repo("acme/app", owner_login="")

        with pytest.raises(InvalidServerDataError):
            client.get_repo("acme", "app")

    def test_list_org_and_user_repos(self, client, transport):
        transport.pages["list_org_repos"] = [[repo("acme/a")], [repo("acme/b")]]
        transport.pages["list_user_repos"] = [[repo("jdoe/dotfiles")]]

        assert [item.name for item in client.list_org_repos("acme")] == ["a", "b"]
        assert [item.name for item in client.list_user_repos("jdoe")] == ["dotfiles"]

    def test_list_repos_validates_every_object(self, client, transport):
        transport.pages["list_org_repos"] = [[repo("acme/a"), repo("")]]

        with pytest.raises(InvalidServerDataError):
            client.list_org_repos("acme")

    def test_create_repo_for_the_authenticated_user(self, client, transport):
        transport.results["create_repo"] = repo("jdoe/app")
        req = CreateRepoOption(name="app")

        client.create_repo("", req)

        assert transport.calls == [("create_repo", (req,))]

    def test_create_repo_in_an_organization(self, client, transport):
        transport.results["create_org_repo"] = repo("acme/app")
        req = CreateRepoOption(name="app")

        client.create_repo("acme", req)

        assert transport.calls == [("create_org_repo", ("acme", req))]

    def test_create_repo_validates_result(self, client, transport):
        transport.results["create_org_repo"] = repo("")

        with pytest.raises(InvalidServerDataError):
            client.create_repo("acme", CreateRepoOption(name="app"))

    def test_update_repo(self, client, transport):
        transport.results["edit_repo"] = repo("acme/app", description="new")

        assert client.update_repo("acme", "app", EditRepoOption(description="new")).description == "new"

    def test_delete_repo_is_refused_without_opt_in(self, client, transport, caplog):
        with caplog.at_level(logging.WARNING):
            with pytest.raises(DestructiveCallDisallowedError):
                client.delete_repo("acme", "app")

        assert transport.calls == []
        assert any(getattr(record, "event", None) == "gitea.repo.delete.blocked" for record in caplog.records)

    def test_delete_repo_with_opt_in(self, destructive_client, transport):
        destructive_client.delete_repo("acme", "app")

        assert transport.calls == [("delete_repo", ("acme", "app"))]

    def test_delete_repo_translates_errors(self, destructive_client, transport):
        transport.failures["delete_repo"] = api_error(404)

        with pytest.raises(NotFoundError):
            destructive_client.delete_repo("acme", "ghost")


class TestDeployKeys:
    def test_list_keys_is_paginated_and_validated(self, client, transport):
        transport.pages["list_deploy_keys"] = [[key("a")], [key("b")]]

        assert [item.title for item in client.list_keys("acme", "app")] == ["a", "b"]

    def test_list_keys_rejects_key_without_material(self, client, transport):
        transport.pages["list_deploy_keys"] = [[key("a"), key("b", "")]]

        with pytest.raises(InvalidServerDataError):
            client.list_keys("acme", "app")

    def test_create_and_delete_key(self, client, transport):
        transport.results["create_deploy_key"] = key("ci", id=9)
        req = CreateKeyOption(title="ci", key="ssh-ed25519 AAAA")

        assert client.create_key("acme", "app", req).id == 9
        client.delete_key("acme", "app", 9)

        assert transport.call_names() == ["create_deploy_key", "delete_deploy_key"]

    def test_delete_key_failure_is_wrapped(self, client, transport):
        transport.failures["delete_deploy_key"] = api_error(403, "forbidden")

        with pytest.raises(ProviderRequestError) as excinfo:
            client.delete_key("acme", "app", 9)

        assert excinfo.value.status_code == 403


class TestTeamAccessAndCommits:
    def test_get_team_permissions(self, client, transport):
        transport.results["check_repo_team"] = team("devs", 3, permission="write")

        assert client.get_team_permissions("acme", "app", "devs") == "write"

    def test_missing_team_answer_is_invalid_data(self, client, transport):
        with pytest.raises(InvalidServerDataError):
            client.get_team_permissions("acme", "app", "devs")

    def test_get_repo_teams_is_single_call(self, client, transport):
        transport.results["list_repo_teams"] = [team("devs", 3)]

        assert [item.name for item in client.get_repo_teams("acme", "app")] == ["devs"]
        assert transport.call_names() == ["list_repo_teams"]

    def test_add_and_remove_team(self, client, transport):
        client.add_team("acme", "app", "devs", RepositoryPermission.PUSH)
        client.remove_team("acme", "app", "devs")

        assert transport.calls == [
            ("add_repo_team", ("acme", "app", "devs")),
            ("remove_repo_team", ("acme", "app", "devs")),
        ]

    def test_list_commits_page_asks_for_that_page_only(self, client, transport):
        transport.results["list_repo_commits"] = [Commit(sha="abc")]

        commits = client.list_commits_page("acme", "app", "main", 10, 3)

        assert [item.sha for item in commits] == ["abc"]
        assert transport.calls == [("list_repo_commits", ("acme", "app", "main", 3, 10))]


class TestPullRequests:
    def test_list_is_a_single_unpaged_request(self, client, transport):
        transport.results["list_repo_pull_requests"] = [PullRequest(number=1), PullRequest(number=2)]

        result = client.list_pull_requests("acme", "app")

        assert [item.number for item in result] == [1, 2]
        assert transport.calls == [("list_repo_pull_requests", ("acme", "app", 0))]

    def test_create_get_merge(self, client, transport):
        transport.results["create_pull_request"] = PullRequest(number=4, title="feat")
        transport.results["get_pull_request"] = PullRequest(number=4, title="feat")

        req = CreatePullRequestOption(title="feat", head="f", base="main")
        created = client.create_pull_request("acme", "app", req)
        fetched = client.get_pull_request("acme", "app", 4)
        merged = client.merge_pull_request("acme", "app", 4, MergePullRequestOption(style="squash"))

        assert created.number == fetched.number == 4
        assert merged is True

    def test_null_pull_request_in_list_is_invalid_data(self, client, transport):
        transport.results["list_repo_pull_requests"] = [PullRequest(number=1), None]

        with pytest.raises(InvalidServerDataError):
            client.list_pull_requests("acme", "app")

    def test_get_missing_pull_request(self, client, transport):
        transport.failures["get_pull_request"] = api_error(404)

        with pytest.raises(NotFoundError):
            client.get_pull_request("acme", "app", 99)
