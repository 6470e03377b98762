from pathlib import PurePosixPath

from oprq.core.naming import derive, derive_file_path, path_tokens, to_pascal_case, type_identifier


class TestDerive:
    def test_fallback_from_method_and_path(self):
        ident = derive("get", "/users/{userId}/orders")
        assert ident.raw == "getUsersByUserIdOrders"
        assert ident.pascal == "GetUsersByUserIdOrders"

    def test_method_is_lower_cased(self):
        assert derive("POST", "/pets").raw == "postPets"

    def test_declared_id_wins(self):
        ident = derive("get", "/pets", "listPets")
        assert ident.raw == "listPets"
        assert ident.pascal == "ListPets"

    def test_empty_declared_id_falls_back(self):
        assert derive("get", "/pets", "").raw == "getPets"

    def test_pascal_only_changes_first_character(self):
        assert derive("get", "/x", "list_all-pets").pascal == "List_all-pets"

    def test_separators_fold_into_tokens(self):
        assert derive("get", "/user-profiles/{profile_id}").raw == "getUserProfilesByProfileId"

    def test_deterministic(self):
        assert derive("get", "/a/{b}") == derive("get", "/a/{b}")


class TestPathTokens:
    def test_tokens(self):
        assert path_tokens("/users/{userId}/orders") == ["Users", "ByUserId", "Orders"]

    def test_root_has_no_tokens(self):
        assert path_tokens("/") == []

    def test_to_pascal_case(self):
        assert to_pascal_case("api_v1.0") == "ApiV10"


class TestFilePath:
    def test_shares_tokens_with_identifier(self):
        assert derive_file_path("GET", "/users/{userId}/orders") == PurePosixPath("get/users/byUserId/orders.ts")

    def test_root_path(self):
        assert derive_file_path("get", "/") == PurePosixPath("get/index.ts")


class TestTypeIdentifier:
    def test_valid_names_unchanged(self):
        assert type_identifier("Pet") == "Pet"

    def test_invalid_characters_replaced(self):
        assert type_identifier("Page«Pet»") == "Page_Pet_"
        assert type_identifier("v1.Pet") == "v1_Pet"

    def test_leading_digit(self):
        assert type_identifier("1Pet") == "_1Pet"

    def test_names_clashing_with_module_aliases(self):
        assert type_identifier("ErrorResponse") == "ErrorResponseSchema"
        assert type_identifier("Response") == "ResponseSchema"
        assert type_identifier("Responses") == "Responses"
