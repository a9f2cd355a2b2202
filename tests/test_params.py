from curly.generator.params import classify, extract_path_params, variable_name
from curly.parser.base import Operation, Parameter, Schema, SchemaKind


def _param(name, location, **kwargs):
    return Parameter(name=name, location=location, **kwargs)


class TestExtractPathParams:
    def test_left_to_right_order(self):
        assert extract_path_params("/orgs/{org}/users/{id}") == ["org", "id"]

    def test_no_params(self):
        assert extract_path_params("/users") == []

    def test_duplicates_collapsed(self):
        assert extract_path_params("/{a}/{b}/{a}") == ["a", "b"]


class TestVariableName:
    def test_uppercased(self):
        assert variable_name("limit") == "LIMIT"

    def test_header_dashes(self):
        assert variable_name("X-Request-Id") == "X_REQUEST_ID"

    def test_punctuation_and_leading_digit(self):
        assert variable_name("page[size]") == "PAGE_SIZE_"
        assert variable_name("2fa") == "_2FA"


class TestClassify:
    def test_no_parameters(self):
        result = classify("/users", Operation(method="GET", path="/users"))
        assert result.path == result.query == result.header == result.form_data == []

    def test_undeclared_path_params_are_required(self):
        result = classify("/users/{id}/posts/{postId}", Operation(method="GET", path="/users/{id}/posts/{postId}"))
        assert [v.variable_name for v in result.path] == ["ID", "POSTID"]
        assert all(v.required for v in result.path)

    def test_declared_path_param_enriches(self):
        op = Operation(
            method="GET",
            path="/users/{id}",
            parameters=[
                _param("id", "path", description="User id", example=7,
                       type_schema=Schema(kind=SchemaKind.INTEGER, enum=[1, 2])),
            ],
        )
        spec = classify(op.path, op).path[0]
        assert spec.description == "User id"
        assert spec.kind == SchemaKind.INTEGER
        assert spec.enum == [1, 2]
        assert spec.example == 7

    def test_buckets_keep_declaration_order(self):
        op = Operation(
            method="POST",
            path="/upload/{id}",
            parameters=[
                _param("sort", "query"),
                _param("X-Trace-Id", "header"),
                _param("format", "query"),
                _param("file", "formData"),
                _param("session", "cookie"),
                _param("body", "body"),
            ],
        )
        result = classify(op.path, op)
        assert [v.source_name for v in result.query] == ["sort", "format"]
        assert [v.variable_name for v in result.header] == ["X_TRACE_ID"]
        assert [v.variable_name for v in result.form_data] == ["FILE"]
        assert len(result.path) == 1

    def test_example_falls_back_to_schema_example(self):
        op = Operation(
            method="GET",
            path="/search",
            parameters=[_param("q", "query", type_schema=Schema(kind=SchemaKind.STRING, example="cats"))],
        )
        assert classify(op.path, op).query[0].example == "cats"
